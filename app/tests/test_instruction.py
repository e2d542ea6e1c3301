import pytest
from chip8 import instruction as ins
from chip8.instruction import decode


@pytest.mark.parametrize(
    "opcode, expected",
    [
        (0x00E0, ins.Cls()),
        (0x00EE, ins.Ret()),
        (0x1228, ins.Jp(0x228)),
        (0x2ABC, ins.Call(0xABC)),
        (0x3A42, ins.SeByte(0xA, 0x42)),
        (0x4A42, ins.SneByte(0xA, 0x42)),
        (0x5120, ins.SeReg(1, 2)),
        (0x6A02, ins.LdByte(0xA, 0x02)),
        (0x7305, ins.AddByte(3, 5)),
        (0x8120, ins.LdReg(1, 2)),
        (0x8121, ins.OrReg(1, 2)),
        (0x8122, ins.AndReg(1, 2)),
        (0x8123, ins.XorReg(1, 2)),
        (0x8124, ins.AddRegCarry(1, 2)),
        (0x8125, ins.SubReg(1, 2)),
        (0x8126, ins.Shr(1)),
        (0x8127, ins.SubNReg(1, 2)),
        (0x812E, ins.Shl(1)),
        (0x9120, ins.SneReg(1, 2)),
        (0xA123, ins.LdI(0x123)),
        (0xB123, ins.JpV0(0x123)),
        (0xC30F, ins.Rnd(3, 0x0F)),
        (0xD015, ins.Drw(0, 1, 5)),
        (0xE49E, ins.Skp(4)),
        (0xE4A1, ins.Sknp(4)),
        (0xF507, ins.LdRegDt(5)),
        (0xF50A, ins.KeyWait(5)),
        (0xF515, ins.LdDt(5)),
        (0xF518, ins.LdSt(5)),
        (0xF51E, ins.AddI(5)),
        (0xF529, ins.LdFont(5)),
        (0xF533, ins.StoreBcd(5)),
        (0xF555, ins.Store(5)),
        (0xF565, ins.Read(5)),
    ],
)
def test_decode(opcode, expected):
    assert decode(opcode) == expected


@pytest.mark.parametrize("opcode", [0x0000, 0x0123, 0x5121, 0x812F, 0x9121, 0xE000, 0xF0FF, 0xFFFF])
def test_unrecognized_opcodes_never_raise(opcode):
    assert decode(opcode) == ins.Unknown(opcode)


def test_mnemonics():
    assert str(decode(0x00E0)) == "CLS"
    assert str(decode(0x1228)) == "JP 0x228"
    assert str(decode(0x6A02)) == "LD VA, 0x02"
    assert str(decode(0xD015)) == "DRW V0, V1, 5"
    assert str(decode(0x8124)) == "ADD V1, V2"
    assert str(decode(0x0123)) == "??? 0x0123"


def test_nibbles():
    assert ins.nibbles(0xD015) == (0xD, 0x0, 0x1, 0x5)
