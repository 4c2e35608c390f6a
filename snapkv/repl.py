#!/usr/bin/env python3
"""
snapkv Interactive Entry Point

Reads one command per line from stdin, applies it to the store and writes
the result to stdout. Logging goes to stderr.

Usage:
    python -m snapkv.repl                             # Default snapshot (snapkv.json)
    python -m snapkv.repl --snapshot data/kv.json     # Custom snapshot path
    python -m snapkv.repl --save-policy write-through # Save after every mutation
    python -m snapkv.repl --debug                     # Enable debug logging

Environment Variables:
    SNAPKV_SNAPSHOT_PATH - Snapshot file location
    SNAPKV_SAVE_POLICY   - on-exit or write-through
    SNAPKV_FSYNC         - fsync snapshots before swapping them in (true/false)
    SNAPKV_DEBUG         - Enable debug mode (true/false)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Union

from .config.settings import SAVE_POLICIES, settings
from .core.processor import CommandProcessor
from .errors import InvalidCommandError, KeyNotFoundError, SnapshotError
from .protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)


class Repl:
    """
    Line-oriented front end for a CommandProcessor.

    Each input line is parsed, applied and rendered. Bad input and missing
    keys are reported and the loop carries on. The store is saved on EXIT
    or end of input, and after every successful mutation when the save
    policy is "write-through".

    Attributes:
        processor: The CommandProcessor holding the store
        snapshot_path: Where the store is saved
        save_policy: "on-exit" or "write-through"
        finished: True once EXIT has been handled
    """

    def __init__(
            self,
            processor: CommandProcessor,
            snapshot_path: Union[str, Path] = None,
            save_policy: str = None,
    ):
        self.processor = processor
        self.snapshot_path = Path(snapshot_path if snapshot_path is not None else settings.SNAPSHOT_PATH)
        self.save_policy = save_policy if save_policy is not None else settings.SAVE_POLICY
        if self.save_policy not in SAVE_POLICIES:
            raise ValueError(f"unknown save policy: {self.save_policy}")

        self.parser = ProtocolParser()
        self.finished = False
        self._total_commands = 0

    def handle_line(self, line: str) -> str:
        """
        Process a single input line.

        Args:
            line: Raw input (may include trailing newline)

        Returns:
            The rendered output, newline-terminated.
        """
        try:
            command = self.parser.parse_request(line)
        except InvalidCommandError as exc:
            logger.debug(f"Rejected input {line.rstrip()!r}: {exc}")
            return self.parser.format_error(exc)

        self._total_commands += 1
        try:
            response = self.processor.apply(command)
        except KeyNotFoundError as exc:
            return self.parser.format_error(exc)

        output = self.parser.format_response(response)

        if command.type.mutates and self.save_policy == "write-through":
            output += self.save_if_dirty()
        if response.terminate:
            self.finished = True
            output += self.save_if_dirty()
        return output

    def run(self, stdin: TextIO = None, stdout: TextIO = None, prompt: str = None) -> int:
        """
        Read commands until EXIT or end of input.

        Args:
            stdin: Input stream (default sys.stdin)
            stdout: Output stream (default sys.stdout)
            prompt: Text written before each line ("" disables it)

        Returns:
            Number of commands applied
        """
        stdin = stdin if stdin is not None else sys.stdin
        stdout = stdout if stdout is not None else sys.stdout
        prompt = prompt if prompt is not None else settings.PROMPT

        while not self.finished:
            if prompt:
                stdout.write(prompt)
                stdout.flush()

            line = stdin.readline()
            if not line:
                logger.debug("End of input")
                stdout.write(self.save_if_dirty())
                break

            stdout.write(self.handle_line(line))
            stdout.flush()

        return self._total_commands

    def save_if_dirty(self) -> str:
        """Save if the store changed; return an error line on failure."""
        if not self.processor.dirty:
            return ""
        try:
            self.processor.save(self.snapshot_path)
        except SnapshotError as exc:
            logger.error(f"Snapshot save failed: {exc}")
            return self.parser.format_error(exc)
        return ""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="snapkv: Persistent Key-Value Store",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--snapshot",
        type=str,
        default=settings.SNAPSHOT_PATH,
        help="Path of the snapshot file",
    )

    parser.add_argument(
        "--save-policy",
        choices=SAVE_POLICIES,
        default=settings.SAVE_POLICY,
        help="When to write the snapshot",
    )

    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Do not print a prompt before each command",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    # argparse does not check defaults (e.g. SNAPKV_SAVE_POLICY) against choices
    if args.save_policy not in SAVE_POLICIES:
        parser.error(
            f"invalid save policy {args.save_policy!r} "
            f"(choose from {', '.join(SAVE_POLICIES)})"
        )

    return args


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the interactive store."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    logger.info("Starting snapkv")
    logger.info(f"  Snapshot: {args.snapshot}")
    logger.info(f"  Save policy: {args.save_policy}")

    try:
        processor = CommandProcessor.from_snapshot(args.snapshot)
    except SnapshotError as exc:
        # Leave the file alone so it can be inspected or restored
        logger.error(f"Cannot load snapshot: {exc}")
        print(ProtocolParser().format_error(exc), end="", file=sys.stderr)
        return 1

    repl = Repl(processor, snapshot_path=args.snapshot, save_policy=args.save_policy)
    try:
        count = repl.run(prompt="" if args.no_prompt else None)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        sys.stdout.write(repl.save_if_dirty())
        return 130

    logger.info(f"Processed {count} commands, shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
