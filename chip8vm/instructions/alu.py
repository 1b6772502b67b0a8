"""CHIP-8 ALU operations (8xxx).

Each operation maps the pre-instruction values of VX and VY to a result
and, for arithmetic and shifts, a flag. The flag is written to VF after the
result, so when X is F the flag wins. Bitwise operations return no flag and
leave VF alone.
"""

from typing import Callable, Optional

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER

AluOperation = Callable[[jnp.ndarray, jnp.ndarray], tuple[jnp.ndarray, Optional[jnp.ndarray]]]


def alu_set(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.uint16) + jnp.astype(vy, jnp.uint16)
    carry = result > 255
    return result & 0xFF, carry


def alu_sub_xy(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY5 - Subtract: VX -= VY, VF = VX > VY."""
    not_borrow = vx > vy
    result = (vx - vy) & 0xFF
    return result, not_borrow


def alu_shift_right(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY6 - Shift right: VX >>= 1, VF = old LSB."""
    shifted_bit = vx & 1
    result = vx >> 1
    return result, shifted_bit


def alu_sub_yx(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XY7 - Subtract: VX = VY - VX, VF = VY > VX."""
    not_borrow = vy > vx
    result = (vy - vx) & 0xFF
    return result, not_borrow


def alu_shift_left(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple:
    """8XYE - Shift left: VX <<= 1, VF = old MSB."""
    shifted_bit = (vx >> 7) & 1
    result = (vx << 1) & 0xFF
    return result, shifted_bit


def make_alu_instruction(operation: AluOperation):
    """Wrap an ALU operation into an instruction handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        result, flag = operation(vx, vy)

        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return state.replace(V=new_V)

    alu_instruction.__doc__ = operation.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
