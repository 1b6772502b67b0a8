"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Sequence, Union

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np

from chip8vm.state import EmulatorState
from chip8vm.decode import Instruction, classify, decode
from chip8vm.constants import ADDRESS_MASK, FAULT_NONE, MAX_PROGRAM_SIZE, NUM_KEYS, PROGRAM_START
from chip8vm.errors import FAULT_EXCEPTIONS, InvalidProgramByteError, ProgramTooLargeError
from chip8vm.logging import scan_with_progress
from chip8vm.instructions.system import execute_clear_screen, execute_return, execute_invalid
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8vm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

ProgramImage = Union[bytes, bytearray, memoryview, Sequence[int], np.ndarray, jnp.ndarray]

# Indexed by Instruction
INSTRUCTION_HANDLERS = (
    execute_clear_screen,
    execute_return,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register,
    execute_set,
    execute_add,
    execute_alu_set,
    execute_alu_or,
    execute_alu_and,
    execute_alu_xor,
    execute_alu_add,
    execute_alu_sub_xy,
    execute_alu_shift_right,
    execute_alu_sub_yx,
    execute_alu_shift_left,
    execute_skip_if_not_equal_register,
    execute_set_index,
    execute_jump_with_offset,
    execute_random,
    execute_display,
    execute_skip_if_key,
    execute_skip_if_not_key,
    execute_get_delay_timer,
    execute_wait_for_key,
    execute_set_delay_timer,
    execute_set_sound_timer,
    execute_add_to_index,
    execute_font_character,
    execute_bcd_conversion,
    execute_store_registers,
    execute_load_registers,
    execute_invalid,
)
assert len(INSTRUCTION_HANDLERS) == len(Instruction)


def _dispatch(state: EmulatorState, instruction: jnp.ndarray) -> EmulatorState:
    return jax.lax.switch(classify(instruction), INSTRUCTION_HANDLERS, state, decode(instruction))


def _halted(state: EmulatorState, *_) -> EmulatorState:
    return state


def is_halted(state: EmulatorState) -> jnp.ndarray:
    """True once a fault has been recorded."""
    return state.fault != FAULT_NONE


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction. A halted machine is left unchanged.

    pc is expected to point past ``instruction`` already, as after :func:`fetch`.
    """
    instruction = jnp.astype(instruction, jnp.uint16)
    return jax.lax.cond(is_halted(state), _halted, _dispatch, state, instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory and advance pc past it."""
    high = state.memory[state.pc & ADDRESS_MASK]
    low = state.memory[(state.pc + 1) & ADDRESS_MASK]
    return state.replace(pc=state.pc + 2), _pack_u16(high, low)


def step(state: EmulatorState) -> EmulatorState:
    """Fetch and execute one instruction."""
    def _step(state):
        state, instruction = fetch(state)
        return execute(state, instruction)

    return jax.lax.cond(is_halted(state), _halted, _step, state)


def raise_if_faulted(state: EmulatorState) -> EmulatorState:
    """Raise the :class:`~chip8vm.errors.MachineFault` recorded in ``state``, if any."""
    code = int(state.fault)
    if code == FAULT_NONE:
        return state
    raise FAULT_EXCEPTIONS[code](int(state.fault_pc), int(state.fault_opcode))


def step_checked(state: EmulatorState) -> EmulatorState:
    """Run one step and raise immediately if it faulted."""
    return raise_if_faulted(step(state))


def _program_bytes(values: np.ndarray) -> np.ndarray:
    if values.size and not np.issubdtype(values.dtype, np.integer):
        raise InvalidProgramByteError(0, values[0].item())
    out_of_range = np.flatnonzero((values < 0) | (values > 0xFF))
    if out_of_range.size:
        index = int(out_of_range[0])
        raise InvalidProgramByteError(index, values[index].item())
    return values.astype(np.uint8)


def load_program(state: EmulatorState, program: ProgramImage) -> EmulatorState:
    """Copy a program image into memory at 0x200.

    Raises:
        ProgramTooLargeError: the image does not fit below 0x1000.
        InvalidProgramByteError: a value of the image is not an integer in 0..255.

    Memory is not touched when loading fails.
    """
    if isinstance(program, (bytes, bytearray, memoryview)):
        data = np.frombuffer(program, dtype=np.uint8)
    else:
        data = _program_bytes(np.asarray(program).reshape(-1))
    if data.size > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(int(data.size))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + data.size].set(jnp.asarray(data, dtype=jnp.uint8))
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)


def decrement_timers(state: EmulatorState) -> EmulatorState:
    """Count both timers down by one tick, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def sound_active(state: EmulatorState) -> jnp.ndarray:
    """True while the host should emit the tone."""
    return state.sound_timer > 0


def set_keypad(state: EmulatorState, pressed) -> EmulatorState:
    """Replace the whole keypad with 16 pressed/released flags."""
    keypad = jnp.asarray(pressed, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Keypad state must have {NUM_KEYS} entries, got shape {keypad.shape}")
    return state.replace(keypad=keypad)


def press_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark key 0x0-0xF as pressed."""
    return state.replace(keypad=state.keypad.at[key & 0xF].set(True))


def release_key(state: EmulatorState, key: int) -> EmulatorState:
    """Mark key 0x0-0xF as released."""
    return state.replace(keypad=state.keypad.at[key & 0xF].set(False))


@partial(jax.jit, static_argnums=1)
def run_n_instruction(state: EmulatorState, n: int) -> EmulatorState:
    """Run ``n`` steps. Stops making progress as soon as the machine faults."""
    state, _ = jax.lax.scan(lambda s, _: (step(s), None), state, length=n)
    return state


@partial(jax.jit, static_argnums=1)
def run_frame(state: EmulatorState, instructions_per_frame: int) -> EmulatorState:
    """Run one 60 Hz frame: ``instructions_per_frame`` steps then one timer tick."""
    state = run_n_instruction(state, instructions_per_frame)
    return decrement_timers(state)


@partial(jax.jit, static_argnames=("num_frames", "instructions_per_frame", "progress"))
def run_frames(
    state: EmulatorState,
    num_frames: int,
    instructions_per_frame: int,
    progress: bool = False,
) -> EmulatorState:
    """Run ``num_frames`` frames back to back without wall-clock pacing."""
    def frame(state, _):
        return run_frame(state, instructions_per_frame), None

    if progress:
        frame = scan_with_progress(num_frames)(frame)

    state, _ = jax.lax.scan(frame, state, jnp.arange(num_frames))
    return state
