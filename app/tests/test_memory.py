import pytest
from chip8.exceptions import OutOfBoundsAccess
from chip8.memory import FONT_DATA, FONT_START_ADDR, MAX_ROM_SIZE, MEMORY_SIZE, ROM_START_ADDR, Memory


def test_font_installed_on_construction():
    memory = Memory()
    assert memory.to_bytes()[FONT_START_ADDR : FONT_START_ADDR + len(FONT_DATA)] == FONT_DATA


@pytest.mark.parametrize("addr", [MEMORY_SIZE, MEMORY_SIZE + 1, 0xFFFF, -1])
def test_out_of_bounds(addr):
    memory = Memory()
    with pytest.raises(OutOfBoundsAccess) as exc:
        memory.read(addr)
    assert exc.value.address == addr
    with pytest.raises(OutOfBoundsAccess):
        memory.write(addr, 1)


def test_last_byte_is_addressable():
    memory = Memory()
    memory.write(MEMORY_SIZE - 1, 0x1AB)
    assert memory.read(MEMORY_SIZE - 1) == 0xAB


def test_load_rom_at_0x200():
    memory = Memory()
    assert memory.load_rom(b"\x12\x34") == 2
    assert memory.read(ROM_START_ADDR) == 0x12
    assert memory.read(ROM_START_ADDR + 1) == 0x34


def test_oversized_rom_is_truncated_not_rejected():
    memory = Memory()
    rom = bytes([0xAA]) * (MAX_ROM_SIZE + 100)
    assert memory.load_rom(rom) == MAX_ROM_SIZE
    assert memory.read(MEMORY_SIZE - 1) == 0xAA
    assert memory.to_bytes()[FONT_START_ADDR : FONT_START_ADDR + len(FONT_DATA)] == FONT_DATA


def test_from_bytes_size_check():
    with pytest.raises(ValueError):
        Memory.from_bytes(b"\x00" * 10)
    restored = Memory.from_bytes(Memory().to_bytes())
    assert restored.to_bytes() == Memory().to_bytes()
