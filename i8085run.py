#!/usr/bin/env python3
"""
i8085run — load an 8085 program and trace it to HLT

Usage:
    python i8085run.py <program.asm | -> [--profile classic|strict|trainer]
                       [--config run.json] [--origin 0x0000] [--window 0000:40]
                       [--format text|rich|none] [--strict-load] [--listing]
                       [-v] [-q] [--log-dir logs]

Examples:
    python i8085run.py add.asm                     # plain-text trace
    python i8085run.py add.asm --format rich       # table per instruction
    python i8085run.py add.asm --listing           # show encoded bytes, no run
    echo "MVI A,05\nHLT" | python i8085run.py -

Exit status: 0 on HLT, 1 on a load/config/IO error, 2 when a strict run
stops on an unimplemented opcode.
"""

import argparse
import logging
import sys
from pathlib import Path

from i8085_asm import ProgramLoader, LoaderError
from i8085_emulator import (
    __version__, I8085Emulator, StopReason, PROFILES, ConfigError, load_config,
    TextReporter, RichReporter,
)
from i8085_emulator.config import parse_int
from i8085_emulator.log_setup import setup_logging

log = logging.getLogger("i8085.cli")


def parse_window_arg(value: str):
    """'START:LEN' in hex, e.g. '0000:40' → (0x0000, 0x40)."""
    try:
        start, length = value.split(":", 1)
        return int(start, 16), int(length, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected START:LEN in hex, got '{value}'") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i8085run",
        description="Instructional 8085 subset emulator",
        epilog="Profiles: " + ", ".join(
            f"{name} ({p['description']})" for name, p in PROFILES.items()),
    )
    parser.add_argument("input", help="Program text file, or - for stdin")
    parser.add_argument("--profile", default="classic", choices=list(PROFILES),
                        help="Run profile (default: classic)")
    parser.add_argument("--config", default=None,
                        help="JSON file with settings merged over the profile")
    parser.add_argument("--origin", default=None,
                        help="Load address and initial PC (hex, e.g. 0x0000)")
    parser.add_argument("--window", type=parse_window_arg, default=None,
                        help="Memory window in every trace entry, START:LEN in hex")
    parser.add_argument("--format", choices=["text", "rich", "none"],
                        default="text",
                        help="Trace output format; none prints no trace (default: text)")
    parser.add_argument("--strict-load", action="store_true",
                        help="Fail on the first unrecognized line instead of skipping it")
    parser.add_argument("--listing", action="store_true",
                        help="Print the loader listing and exit without running")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="More console logging (-v info, -vv debug)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log errors")
    parser.add_argument("--log-dir", default=None,
                        help="Also write a debug log file into this directory")
    parser.add_argument("--version", action="version",
                        version=f"i8085run {__version__}")
    return parser


def _console_level(args) -> int:
    if args.quiet:
        return logging.ERROR
    if args.verbose >= 2:
        return logging.DEBUG
    if args.verbose == 1:
        return logging.INFO
    return logging.WARNING


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(console_level=_console_level(args),
                  log_dir=Path(args.log_dir) if args.log_dir else None)

    try:
        config = load_config(args.config, profile=args.profile)
        overrides = {}
        if args.origin is not None:
            overrides["origin"] = parse_int(args.origin, "--origin")
        if args.window is not None:
            overrides["window_start"], overrides["window_length"] = args.window
        config = config.with_overrides(**overrides)
    except ConfigError as e:
        log.error("Configuration error: %s", e)
        return 1

    try:
        source = _read_source(args.input)
    except (OSError, UnicodeDecodeError) as e:
        log.error("Cannot read %s: %s", args.input, e)
        return 1

    try:
        result = ProgramLoader(origin=config.origin, strict=args.strict_load).load(source)
    except LoaderError as e:
        log.error("Load error: %s", e)
        return 1

    if args.listing:
        print(result.listing())
        return 0

    reporters = []
    if args.format == "rich":
        reporters.append(RichReporter())
    elif args.format == "text":
        reporters.append(TextReporter(sys.stdout))

    log.info("Profile %s: %s", args.profile, config.to_dict())
    emu = I8085Emulator(config, reporters=reporters)
    emu.load_program(result)
    reason = emu.run()

    log.info("Stopped: %s after %d instructions", reason.value, emu.instruction_count)
    if reason is StopReason.ILLEGAL:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
