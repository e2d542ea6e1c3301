from typing import Final, Optional, Type


class Chip8Error(Exception):
    """Base exception for every fault raised while executing a CHIP-8 program."""


class OutOfBoundsAccess(Chip8Error):
    """A memory read or write addressed a byte outside the 4 KB address space."""

    def __init__(self, address: int):
        self.address: Final[int] = address
        super().__init__(f"Memory access out of bounds at ${address:04X}")


class StackOverflow(Chip8Error):
    """CALL issued with all 16 stack slots in use."""

    def __init__(self, pc: Optional[int] = None):
        self.pc: Final[Optional[int]] = pc
        where = f" at ${pc:04X}" if pc is not None else ""
        super().__init__(f"Stack overflow{where}")


class StackUnderflow(Chip8Error):
    """RET issued with an empty stack."""

    def __init__(self, pc: Optional[int] = None):
        self.pc: Final[Optional[int]] = pc
        where = f" at ${pc:04X}" if pc is not None else ""
        super().__init__(f"Stack underflow{where}")


class Chip8LoadError(OSError):
    """A ROM or save-state file could not be read, written or parsed."""


class EmulatorError(Exception):
    def __init__(self, exception: BaseException):
        self.original: Final[BaseException] = exception
        self.exception: Final[Type[BaseException]] = type(exception)
        self.message: Final[str] = str(exception)
        super().__init__(self.message)
