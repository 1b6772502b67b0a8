"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state, create_state_from_seed
from chip8vm.emulator import (
    execute, fetch, step, step_checked, load_rom, load_program, decrement_timers,
    sound_active, set_keypad, press_key, release_key, run_n_instruction, run_frame,
    run_frames, raise_if_faulted, is_halted,
)
from chip8vm.decode import DecodedInstruction, Instruction, classify, decode, instruction_name
from chip8vm.config import MachineConfig
from chip8vm.errors import (
    LoadError, ProgramTooLargeError, InvalidProgramByteError, MachineFault, DecodeError,
    StackOverflowError, StackUnderflowError,
)
from chip8vm.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "create_state_from_seed",
    "fetch",
    "execute",
    "step",
    "step_checked",
    "load_rom",
    "load_program",
    "decrement_timers",
    "sound_active",
    "set_keypad",
    "press_key",
    "release_key",
    "run_n_instruction",
    "run_frame",
    "run_frames",
    "raise_if_faulted",
    "is_halted",
    "DecodedInstruction",
    "Instruction",
    "classify",
    "decode",
    "instruction_name",
    "MachineConfig",
    "LoadError",
    "ProgramTooLargeError",
    "InvalidProgramByteError",
    "MachineFault",
    "DecodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
