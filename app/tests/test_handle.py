import time

import pytest
from chip8.chip8 import Chip8
from chip8.exceptions import Chip8LoadError, StackUnderflow
from chip8.handle import Chip8Handle
from chip8.key_matrix import Chip8Key
from conftest import program
from util.config import DEFAULT_CONFIG

# clear, draw glyph "0" at (0, 0), then spin
DRAW_ROM = program(0x00E0, 0xA050, 0xD015, 0x1206)
# wait for a key into V3, then spin
KEY_ROM = program(0xF30A, 0x1202)


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


def test_start_draws_and_shuts_down():
    with Chip8Handle.start(DRAW_ROM, DEFAULT_CONFIG) as session:
        assert wait_for(session.poll_draw)
        assert wait_for(lambda: session.frame_buffer.lit_count() == 14)
        assert session.is_alive()
    assert not session.is_alive()
    session.shutdown()  # idempotent


def test_rejects_bad_rom_before_starting(tmp_path):
    with pytest.raises(Chip8LoadError):
        Chip8Handle.start(b"", DEFAULT_CONFIG)
    with pytest.raises(Chip8LoadError):
        Chip8Handle.from_rom_file(tmp_path / "missing.ch8", DEFAULT_CONFIG)
    with pytest.raises(Chip8LoadError):
        Chip8Handle.from_save_file(tmp_path / "missing.state", DEFAULT_CONFIG)
    with pytest.raises(Chip8LoadError):
        Chip8Handle.restore(b"garbage", DEFAULT_CONFIG)
    # also an OSError
    with pytest.raises(OSError):
        Chip8Handle.start(b"", DEFAULT_CONFIG)


def test_key_release_completes_await_key():
    with Chip8Handle.start(KEY_ROM, DEFAULT_CONFIG) as session:
        assert wait_for(lambda: Chip8.restore(session.snapshot()).cpu.is_awaiting_key)
        session.send_key_press(Chip8Key.K7)
        assert session.key_matrix.is_pressed(Chip8Key.K7)
        session.send_key_release(Chip8Key.K7)
        assert not session.key_matrix.is_pressed(Chip8Key.K7)
        assert wait_for(lambda: Chip8.restore(session.snapshot()).cpu.registers.V[3] == 7)


def test_pause_and_shutdown_stay_responsive_while_awaiting_key():
    session = Chip8Handle.start(KEY_ROM, DEFAULT_CONFIG)
    session.send_pause()
    session.send_unpause()
    session.shutdown()
    assert not session.is_alive()


def test_snapshot_restore_round_trip():
    with Chip8Handle.start(DRAW_ROM, DEFAULT_CONFIG) as session:
        assert wait_for(lambda: session.frame_buffer.lit_count() == 14)
        session.send_pause()
        blob = session.snapshot()

    with Chip8Handle.restore(blob, DEFAULT_CONFIG) as restored:
        assert restored.frame_buffer.lit_count() == 14
        assert Chip8.restore(restored.snapshot()).cpu.registers.PC == 0x206


def test_save_file_round_trip(tmp_path):
    path = tmp_path / "slot.state"
    with Chip8Handle.start(DRAW_ROM, DEFAULT_CONFIG) as session:
        assert wait_for(lambda: session.frame_buffer.lit_count() == 14)
        session.send_save(path)
        assert wait_for(path.exists)

    with Chip8Handle.from_save_file(path, DEFAULT_CONFIG) as restored:
        assert restored.frame_buffer.lit_count() == 14


def test_fault_is_reported():
    session = Chip8Handle.start(program(0x00EE), DEFAULT_CONFIG)
    assert wait_for(lambda: not session.is_alive())
    session.poll_draw()
    assert session.fault is not None
    assert session.fault.exception is StackUnderflow
    session.shutdown()


def test_out_of_range_key_rejected_on_press_and_release():
    with Chip8Handle.start(KEY_ROM, DEFAULT_CONFIG) as session:
        with pytest.raises(ValueError):
            session.send_key_press(0x10)
        with pytest.raises(ValueError):
            session.send_key_release(0x10)
        assert session.key_matrix.pressed_keys() == []
        assert session.is_alive()


def test_invalid_save_path_keeps_session_alive():
    with Chip8Handle.start(program(0x1200), DEFAULT_CONFIG) as session:
        session.send_save("slot\x00.state")
        session.send_pause()
        session.snapshot()
        assert session.is_alive()
        session.poll_draw()
        assert session.fault is None
