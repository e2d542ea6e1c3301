import pytest
from chip8.chip8 import Chip8
from chip8.key_matrix import Chip8Key
from chip8.state import STATE_SIZE, Chip8State
from conftest import program
from returns.result import Failure, Success


def _busy_machine() -> Chip8:
    machine = Chip8(seed=7)
    # draw glyph "8", call a subroutine, set timers
    machine.load_rom(program(0x6008, 0xF029, 0x6105, 0xD015, 0x6A3C, 0xFA15, 0xFA18, 0x2300))
    for _ in range(8):
        machine.tick()
    machine.key_matrix.press(Chip8Key.K4)
    machine.key_matrix.press(Chip8Key.KF)
    machine.last_released_key = Chip8Key.K9
    return machine


def test_round_trip_reproduces_machine():
    machine = _busy_machine()
    machine.pause()

    blob = machine.snapshot()
    assert len(blob) == STATE_SIZE

    restored = Chip8.restore(blob)
    assert restored.cpu.registers == machine.cpu.registers
    assert restored.memory.to_bytes() == machine.memory.to_bytes()
    assert (restored.frame_buffer.to_array() == machine.frame_buffer.to_array()).all()
    assert restored.key_matrix.pressed_keys() == [Chip8Key.K4, Chip8Key.KF]
    assert restored.last_released_key is Chip8Key.K9
    assert not restored.is_paused()
    assert restored.snapshot() == blob


def test_restored_machine_resumes_at_saved_pc():
    machine = _busy_machine()
    restored = Chip8.restore(machine.snapshot())
    assert restored.cpu.registers.PC == 0x300
    assert restored.cpu.registers.SP == 1
    assert restored.cpu.registers.DT == 0x3C
    assert restored.cpu.registers.ST == 0x3C


def test_await_key_survives_round_trip():
    machine = Chip8()
    machine.load_rom(program(0xF30A))
    machine.tick()
    restored = Chip8.restore(machine.snapshot())
    assert restored.cpu.is_awaiting_key
    assert restored.cpu.awaiting_register == 3


def test_wrong_size_rejected():
    with pytest.raises(ValueError):
        Chip8State.from_bytes(b"\x00" * 10)


def test_file_round_trip(tmp_path):
    machine = _busy_machine()
    path = tmp_path / "slot1.state"
    machine.to_state().save(path)

    result = Chip8State.from_file(path)
    assert isinstance(result, Success)
    assert result.unwrap().to_bytes() == machine.snapshot()


def test_corrupt_file(tmp_path):
    path = tmp_path / "bad.state"
    path.write_bytes(b"nope")
    assert isinstance(Chip8State.from_file(path), Failure)
    assert isinstance(Chip8State.from_file(tmp_path / "missing.state"), Failure)
