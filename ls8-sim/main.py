"""Application entry-point for the LS-8 simulator.

    python main.py program.ls8           # run headless, PRN output on stdout
    python main.py program.ls8 -v        # ... with a per-cycle trace
    python main.py --gui [program.ls8]   # PySide6 window
"""
import argparse
import logging
import sys
from pathlib import Path

from ls8.config import SimConfig
from ls8.cpu_core import CPU
from ls8.loader import ProgramLoadError, load_file


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="main.py", description="LS-8 simulator")
    parser.add_argument("program", nargs="?", type=Path,
                        help="Path to an .ls8 program listing")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log a trace line before every cycle")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Stop after this many cycles even if HLT was not reached")
    parser.add_argument("--mask-not", action="store_true",
                        help="Mask the NOT result to 8 bits like the other ALU ops")
    parser.add_argument("--gui", action="store_true",
                        help="Launch the PySide6 front end")
    parser.add_argument("--interval", type=int, default=50, dest="interval_ms",
                        help="GUI clock period in milliseconds (default: 50)")
    return parser


def run_headless(config: SimConfig, output=print) -> int:
    cpu = CPU(output=output, mask_not=config.mask_not)
    try:
        load_file(cpu, config.program_path)
    except ProgramLoadError as e:
        logging.getLogger("main").error("%s", e)
        return 1
    cpu.run(config.max_steps)
    if cpu.fault is not None:
        return 1
    if cpu.running:
        logging.getLogger("main").warning(
            "stopped after %d steps without reaching HLT", config.max_steps)
        return 2
    return 0


def main(argv=None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    config = SimConfig(
        program_path=args.program,
        max_steps=args.max_steps,
        mask_not=args.mask_not,
        verbose=args.verbose,
        gui=args.gui,
        interval_ms=args.interval_ms,
    )
    logging.basicConfig(level=logging.DEBUG if config.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if config.gui:
        from gui.main_window import run
        return run(config)

    if config.program_path is None:
        parser.error("a program listing is required unless --gui is given")
    return run_headless(config)


if __name__ == "__main__":
    sys.exit(main())
