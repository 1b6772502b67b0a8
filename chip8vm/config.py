"""Run configuration for driving a machine."""

from flax.struct import dataclass, field


@dataclass
class MachineConfig:
    """Host-side parameters for running a program.

    Attributes:
        instruction_frequency: Instructions executed per second of emulated time (typically 700)
        timer_frequency: Timer decrement rate in Hz (60 on real hardware)
        seed: Seed for the random-byte instruction
        log_level: Console logger level
    """
    instruction_frequency: int = field(pytree_node=False, default=700)
    timer_frequency: int = field(pytree_node=False, default=60)
    seed: int = field(pytree_node=False, default=0)
    log_level: str = field(pytree_node=False, default="INFO")

    def __post_init__(self):
        if self.instruction_frequency <= 0:
            raise ValueError(f"instruction_frequency must be positive, got {self.instruction_frequency}")
        if self.timer_frequency <= 0:
            raise ValueError(f"timer_frequency must be positive, got {self.timer_frequency}")

    @property
    def instructions_per_frame(self) -> int:
        """Number of instructions executed between two timer ticks (at least one)."""
        return max(1, self.instruction_frequency // self.timer_frequency)

    def frames_for(self, seconds: float) -> int:
        """Number of timer frames in ``seconds`` of emulated time."""
        return int(seconds * self.timer_frequency)
