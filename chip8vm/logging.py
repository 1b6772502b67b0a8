"""Console reporting for machine runs.

:class:`MachineLogger` prints levelled messages about a run: the program
load, the run plan, faults and the final machine state. :func:`scan_with_progress`
drives a tqdm bar from inside a traced ``jax.lax.scan`` through ``io_callback``.
"""

import time
import sys
from typing import Callable, Optional, Tuple

import jax
import jax.numpy as jnp
from jax.experimental import io_callback

from tqdm import tqdm

from chip8vm.errors import MachineFault
from chip8vm.state import EmulatorState

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"


def format_machine_state(state: EmulatorState) -> str:
    """One line with pc, I, both timers, the lit pixel count and V0-VF."""
    registers = " ".join(f"V{i:X}={int(v):02X}" for i, v in enumerate(state.V))
    return (
        f"pc=0x{int(state.pc):03X} I=0x{int(state.I):03X} "
        f"DT={int(state.delay_timer)} ST={int(state.sound_timer)} "
        f"lit={int(jnp.sum(state.display))} | {registers}"
    )


class MachineLogger:
    """Levelled console reporter for one machine run.

    Colors are used only when the stream is a terminal.
    """

    def __init__(
        self,
        log_level: str = "INFO",
        name: str = "chip8vm",
        stream=None,
        show_timestamps: bool = True,
    ):
        level = log_level.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LOG_LEVELS)}")
        self.name = name
        self.threshold = LOG_LEVELS.index(level)
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def log(self, level: str, message: str):
        if LOG_LEVELS.index(level) < self.threshold:
            return
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{_LEVEL_COLORS[level]}{tag}{_RESET}"
        elapsed = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        print(f"{elapsed}{tag}[{self.name}] {message}", file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def program_loaded(self, path: str):
        self.info(f"Loaded {path}")

    def load_failed(self, path: str, error: Exception):
        self.error(f"Could not load {path}: {error}")

    def run_started(self, num_frames: int, instructions_per_frame: int):
        self.debug(f"Running {num_frames} frames of {instructions_per_frame} instructions")

    def machine_fault(self, fault: MachineFault):
        self.error(f"Execution halted: {fault}")

    def machine_state(self, state: EmulatorState):
        self.info(format_machine_state(state))


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build the traced open/advance and close hooks of a tqdm bar over ``n`` frames.

    The bar advances every ``print_rate`` frames and once more on the last
    frame for whatever is left, so it always ends at ``n/n``.
    """
    if desc is None:
        desc = f"Running {n:,} frames"
    if print_rate is None:
        print_rate = max(1, min(n // 20, 50))
    else:
        print_rate = max(1, min(print_rate, n))

    bars = {}

    def _open():
        bars["bar"] = tqdm(total=n, desc=desc, unit="frame", **kwargs)

    def _advance(frames):
        if "bar" in bars:
            bars["bar"].update(int(frames))

    def _close():
        bar = bars.pop("bar", None)
        if bar is not None:
            bar.close()

    def advance_progress_bar(iter_num):
        done = iter_num + 1
        # Frames finished since the previous update
        pending = done - ((done - 1) // print_rate) * print_rate

        _ = jax.lax.cond(
            iter_num == 0,
            lambda _: io_callback(_open, None, ordered=True),
            lambda _: None,
            operand=None,
        )
        _ = jax.lax.cond(
            (done % print_rate == 0) | (done == n),
            lambda _: io_callback(_advance, None, pending, ordered=True),
            lambda _: None,
            operand=None,
        )

    def close_progress_bar(result, iter_num):
        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_close, None, ordered=True),
            lambda _: None,
            operand=None,
        )
        return result

    return advance_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorate a ``jax.lax.scan`` body so a progress bar tracks its iterations.

    The scanned ``xs`` must be (or start with) the iteration number.
    """
    advance_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, print_rate, desc, **tqdm_kwargs
    )

    def _scan_progress_decorator(func):
        def wrapper_with_progress(carry, x):
            iter_num = x[0] if isinstance(x, tuple) else x
            result = func(carry, x)
            advance_progress_bar(iter_num)
            return close_progress_bar(result, iter_num)

        return wrapper_with_progress

    return _scan_progress_decorator
