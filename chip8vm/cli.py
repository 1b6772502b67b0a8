"""Headless command line runner: load a ROM, run it for a while, report the outcome."""

import argparse
from typing import Optional, Sequence

from chip8vm.config import MachineConfig
from chip8vm.emulator import load_rom, raise_if_faulted, run_frames
from chip8vm.errors import LoadError, MachineFault
from chip8vm.logging import LOG_LEVELS, MachineLogger
from chip8vm.state import create_state_from_seed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8vm",
        description="Run a CHIP-8 program without a display and report the final machine state",
    )
    parser.add_argument("rom", type=str, help="Path to the program image")
    parser.add_argument(
        "--seconds",
        type=float,
        default=1.0,
        help="Emulated run time in seconds (default: 1.0)",
    )
    parser.add_argument(
        "--instruction_frequency",
        type=int,
        default=700,
        help="Instructions per emulated second (default: 700)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the random-byte instruction (default: 0)",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default="INFO",
        choices=LOG_LEVELS,
        help="Console log level (default: INFO)",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while running",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = MachineConfig(
        instruction_frequency=args.instruction_frequency,
        seed=args.seed,
        log_level=args.log_level,
    )
    logger = MachineLogger(log_level=config.log_level)

    state = create_state_from_seed(config.seed)
    try:
        state = load_rom(state, args.rom)
    except (OSError, LoadError) as e:
        logger.load_failed(args.rom, e)
        return 2
    logger.program_loaded(args.rom)

    num_frames = config.frames_for(args.seconds)
    logger.run_started(num_frames, config.instructions_per_frame)
    state = run_frames(state, num_frames, config.instructions_per_frame, progress=args.progress)

    try:
        raise_if_faulted(state)
    except MachineFault as e:
        logger.machine_fault(e)
        logger.machine_state(state)
        return 1

    logger.machine_state(state)
    return 0
