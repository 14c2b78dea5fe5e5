from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from .constants import APPLE2, load_profile
from .encoder import TapeEncoder, iter_samples
from .errors import TapeError, TapeIOError
from .io import (
    STDIN_NAME,
    STDOUT_NAME,
    detach_stdout,
    display_name,
    open_input,
    open_output,
    read_chunks,
    write_raw,
    write_wav,
)

logger = logging.getLogger("a2tape")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="a2tape",
        description="Convert a file to audio for the Apple II cassette input "
        "(mono, unsigned 8-bit samples, 44100 Hz, no header).",
    )
    parser.add_argument("input", nargs="?", default=None, help="Input file (default: standard input)")
    parser.add_argument("-o", "--output", metavar="PATH", default=None, help="Output file (default: standard output)")
    parser.add_argument("--wav", action="store_true", help="Wrap the samples in a WAV header (requires -o)")
    parser.add_argument("--profile", metavar="JSON", default=None, help="JSON file overriding the tape timings")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log progress to stderr (-vv for debug)")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    # stdout may carry the samples, so diagnostics always go to stderr
    logging.basicConfig(level=level, format="%(name)s: %(levelname)s %(message)s")


def run(args: argparse.Namespace) -> int:
    profile = APPLE2 if args.profile is None else load_profile(args.profile)
    logger.info(
        "profile: %d Hz, periods entry=%d tape_in=%d zero=%d one=%d",
        profile.sample_rate_hz,
        profile.entry_period,
        profile.tape_in_period,
        profile.zero_period,
        profile.one_period,
    )

    in_name = display_name(args.input, STDIN_NAME)
    out_name = display_name(args.output, STDOUT_NAME)
    infile = open_input(args.input)
    try:
        enc = TapeEncoder(profile)
        samples = iter_samples(read_chunks(infile, name=in_name), encoder=enc)
        if args.wav:
            total = write_wav(args.output, samples, profile.sample_rate_hz)
        else:
            outfile = open_output(args.output)
            try:
                total = write_raw(outfile, samples, name=out_name)
            finally:
                if out_name != STDOUT_NAME:
                    outfile.close()
    finally:
        if in_name != STDIN_NAME:
            infile.close()

    logger.info(
        "encoded %d bytes from %s, checksum 0x%02X, %d samples (%.2f s) to %s",
        enc.bytes_encoded,
        in_name,
        enc.checksum,
        total,
        total / float(profile.sample_rate_hz),
        out_name,
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.wav and display_name(args.output, STDOUT_NAME) == STDOUT_NAME:
        parser.error("--wav requires -o PATH")
    _configure_logging(args.verbose)

    try:
        return run(args)
    except TapeIOError as e:
        if e.action == "write" and e.path == STDOUT_NAME:
            detach_stdout()
        raise SystemExit(f"a2tape: {e}")
    except (TapeError, ValueError) as e:
        raise SystemExit(f"a2tape: {e}")


if __name__ == "__main__":
    raise SystemExit(main())
