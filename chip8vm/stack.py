"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chip8vm.constants import ADDRESS_MASK, STACK_SIZE
from chip8vm.state import StackState


def is_full(stack: StackState) -> jnp.ndarray:
    """True when another push would overflow."""
    return stack.pointer >= STACK_SIZE


def is_empty(stack: StackState) -> jnp.ndarray:
    """True when a pop would underflow."""
    return stack.pointer <= 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack.

    Callers must check :func:`is_full` first; a push on a full stack leaves it unchanged.
    """
    masked_address = jnp.astype(address & ADDRESS_MASK, jnp.uint16)
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    new_data = jnp.where(is_full(stack), stack.data, stack.data.at[slot].set(masked_address))
    new_pointer = jnp.minimum(stack.pointer + 1, STACK_SIZE)
    return stack.replace(data=new_data, pointer=new_pointer)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack.

    Callers must check :func:`is_empty` first; popping an empty stack returns 0.
    """
    new_pointer = jnp.maximum(stack.pointer - 1, 0)
    popped_address = jnp.where(is_empty(stack), jnp.zeros((), jnp.uint16), stack.data[new_pointer])
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
