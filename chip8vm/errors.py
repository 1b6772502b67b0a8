"""Exceptions raised on the host side of the machine."""

from chip8vm.constants import (
    FAULT_INVALID_OPCODE, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW, MAX_PROGRAM_SIZE,
)
from chip8vm.decode import instruction_name


class LoadError(ValueError):
    """A program image could not be placed in memory."""


class ProgramTooLargeError(LoadError):
    """Program image is larger than the memory available above 0x200."""

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"Program too large: {size} bytes (max {MAX_PROGRAM_SIZE})")


class InvalidProgramByteError(LoadError):
    """Program image holds a value that is not a byte."""

    def __init__(self, index: int, value):
        self.index = index
        self.value = value
        super().__init__(f"Program byte {index} is {value!r}, expected an integer in 0..255")


class MachineFault(Exception):
    """Execution halted on a fault recorded in the machine state."""

    code = 0
    reason = "machine fault"

    def __init__(self, pc: int, opcode: int):
        self.pc = pc
        self.opcode = opcode
        super().__init__(
            f"{self.reason}: {instruction_name(opcode)} (0x{opcode:04X}) at address 0x{pc:03X}"
        )


class DecodeError(MachineFault):
    """Fetched word matches no instruction."""

    code = FAULT_INVALID_OPCODE
    reason = "invalid opcode"


class StackOverflowError(MachineFault):
    """CALL with all 16 return slots in use."""

    code = FAULT_STACK_OVERFLOW
    reason = "stack overflow"


class StackUnderflowError(MachineFault):
    """RET with an empty call stack."""

    code = FAULT_STACK_UNDERFLOW
    reason = "stack underflow"


FAULT_EXCEPTIONS = {
    cls.code: cls for cls in (DecodeError, StackOverflowError, StackUnderflowError)
}
