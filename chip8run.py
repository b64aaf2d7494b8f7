#!/usr/bin/env python3
"""
chip8run — headless CHIP-8 runner

Usage:
    python chip8run.py <rom.ch8> [--cycles N] [--ips 500] [--timer-hz 60]
                                 [--seed N] [--press KEY ...] [--break ADDR ...]
                                 [--trace] [--dump] [--disasm] [--verbose]

Runs a ROM without a window: instructions and 60 Hz timer ticks are
interleaved by count, keys come from --press, and the final frame is
printed with --dump.

Keys for --press are keyboard characters on the usual layout
(1 2 3 4 / Q W E R / A S D F / Z X C V) or keypad digits as 0xA / $A.

Exit codes:
    0  ran to the cycle limit, a breakpoint, or an unanswered key wait
    1  usage / file / load error
    2  the ROM faulted (bad opcode, call stack overflow/underflow)

Examples:
    python chip8run.py pong.ch8 --cycles 5000 --dump
    python chip8run.py keypad_test.ch8 --press 0x1 --press q --dump
    python chip8run.py ibm.ch8 --disasm
"""

import argparse
import logging
import random
import sys
from pathlib import Path

from chip8_emulator import __version__
from chip8_emulator.config import CLOCK_HZ, TIMER_HZ, RunConfig, layout_rows, resolve_key
from chip8_emulator.emu import Chip8Emulator, StopReason
from chip8_emulator.errors import Chip8Error, ProgramLoadError
from chip8_emulator.host import HeadlessHost
from chip8_emulator.log_setup import setup_logging
from chip8_emulator.tools.disassembler import Chip8Disassembler


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return int(value, 16)
    if value.startswith("$"):
        return int(value[1:], 16)
    return int(value)


def _key_arg(value: str) -> int:
    try:
        return resolve_key(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _addr_arg(value: str) -> int:
    try:
        return parse_int_arg(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid address {value!r}")


def build_parser() -> argparse.ArgumentParser:
    layout = "  ".join(" ".join(row) for row in layout_rows())
    parser = argparse.ArgumentParser(
        prog="chip8run",
        description="Headless CHIP-8 interpreter",
        epilog=f"Keyboard layout (keypad order): {layout}",
    )
    parser.add_argument("rom", help="CHIP-8 program image (raw bytes, loaded at $200)")
    parser.add_argument("--cycles", type=parse_int_arg, default=10_000,
                        help="Maximum instructions to execute (default: 10000)")
    parser.add_argument("--ips", type=parse_int_arg, default=CLOCK_HZ,
                        help=f"Instructions per second (default: {CLOCK_HZ})")
    parser.add_argument("--timer-hz", type=parse_int_arg, default=TIMER_HZ,
                        help=f"Timer tick rate (default: {TIMER_HZ})")
    parser.add_argument("--seed", type=parse_int_arg, default=None,
                        help="Seed for the RND instruction (reproducible runs)")
    parser.add_argument("--press", type=_key_arg, action="append", default=[],
                        metavar="KEY", help="Key to feed when the ROM waits (repeatable)")
    parser.add_argument("--break", dest="breakpoints", type=_addr_arg,
                        action="append", default=[], metavar="ADDR",
                        help="Stop before executing ADDR (repeatable)")
    parser.add_argument("--trace", action="store_true",
                        help="Print an instruction trace to stderr")
    parser.add_argument("--dump", action="store_true",
                        help="Print the final display")
    parser.add_argument("--disasm", action="store_true",
                        help="Print a disassembly listing and exit")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log INFO and above to the console")
    parser.add_argument("--log-dir", default=None,
                        help="Also write a DEBUG log file into this directory")
    parser.add_argument("--version", action="version",
                        version=f"chip8run {__version__}")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log = setup_logging(
        "chip8_emulator",
        console_level=logging.INFO if args.verbose else logging.WARNING,
        log_dir=Path(args.log_dir) if args.log_dir else None,
    )

    # Read input
    try:
        rom = Path(args.rom).read_bytes()
    except FileNotFoundError:
        print(f"Error: File not found: {args.rom}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading {args.rom}: {e}", file=sys.stderr)
        return 1

    emu = Chip8Emulator(rng=random.Random(args.seed))
    try:
        emu.load_program(rom)
    except ProgramLoadError as e:
        print(f"Load error: {e}", file=sys.stderr)
        return 1

    if args.disasm:
        for r in Chip8Disassembler().disassemble(emu.mem.program_bytes()):
            print(r.format(show_description=args.verbose))
        return 0

    if args.ips <= 0 or args.timer_hz <= 0:
        print("Error: --ips and --timer-hz must be positive", file=sys.stderr)
        return 1

    config = RunConfig(
        ips=args.ips,
        timer_hz=args.timer_hz,
        max_cycles=args.cycles,
        seed=args.seed,
        trace=args.trace,
        breakpoints=args.breakpoints,
        key_presses=args.press,
    )

    log.info("running %s (%d bytes), %d steps per timer tick",
             args.rom, len(rom), config.steps_per_tick)

    result = HeadlessHost(emu, config).run()

    if args.trace:
        print(emu.get_trace(), file=sys.stderr)

    if args.dump:
        print(emu.display.render())

    print(f"[chip8run] {result.summary()}", file=sys.stderr)
    print(f"[chip8run] {emu.regs.display()}", file=sys.stderr)

    if result.reason in (StopReason.ILLEGAL, StopReason.ERROR):
        fault: Chip8Error = emu.fault
        print(f"Fault: {fault}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
