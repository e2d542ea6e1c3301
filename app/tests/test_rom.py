from chip8.memory import MAX_ROM_SIZE
from chip8.rom import Rom
from returns.result import Failure, Success


def test_from_bytes():
    result = Rom.from_bytes(b"\x00\xe0")
    assert isinstance(result, Success)
    assert result.unwrap().to_bytes() == b"\x00\xe0"


def test_empty_rom_rejected():
    assert isinstance(Rom.from_bytes(b""), Failure)


def test_wrong_type_rejected():
    assert isinstance(Rom.from_bytes("not bytes"), Failure)  # type: ignore[arg-type]


def test_oversized_rom_truncated():
    rom = Rom.from_bytes(b"\x01" * (MAX_ROM_SIZE + 1)).unwrap()
    assert len(rom) == MAX_ROM_SIZE


def test_from_file(tmp_path):
    path = tmp_path / "PONG"
    path.write_bytes(b"\x12\x00")
    rom = Rom.from_file(path).unwrap()
    assert rom.file == str(path)
    assert Rom.is_valid_file(path) == (True, None)


def test_missing_file(tmp_path):
    assert isinstance(Rom.from_file(tmp_path / "missing"), Failure)
    ok, error = Rom.is_valid_file(tmp_path / "missing")
    assert not ok
    assert error.startswith("Failed to read file")
