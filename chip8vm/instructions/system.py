"""CHIP-8 system instructions (0x0xxx) and fault handling."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FAULT_INVALID_OPCODE, FAULT_STACK_UNDERFLOW
from chip8vm.stack import pop, is_empty


def halt(state: EmulatorState, instruction: DecodedInstruction, code: int) -> EmulatorState:
    """Record a fault and rewind pc onto the instruction that raised it.

    pc is assumed to already point past ``instruction``, as it does after a fetch.
    """
    faulting_pc = jnp.astype(state.pc - 2, jnp.uint16)
    return state.replace(
        pc=faulting_pc,
        fault=jnp.astype(code, jnp.uint8),
        fault_pc=faulting_pc,
        fault_opcode=jnp.astype(instruction.raw, jnp.uint16),
    )


def execute_invalid(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Word matches no instruction."""
    return halt(state, instruction, FAULT_INVALID_OPCODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def do_return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda state: halt(state, instruction, FAULT_STACK_UNDERFLOW),
        do_return,
        state
    )
