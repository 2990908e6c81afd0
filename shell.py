"""
Command shell for the contiguous memory allocator.

Reads one command per line and drives a MemoryEngine:

    RQ <ProcessID> <Size> <Strategy>   request memory (F, B or W)
    RL <ProcessID>                     release a process
    C                                  compact memory
    STAT                               report the block list
    X                                  exit

Usage:
    allocator <capacity> [--script FILE] [--trace] [--no-prompt]
"""

import argparse
import sys
from typing import List, Optional

from engine import FREE_LABEL, AllocatorError, FitStrategy, MemoryEngine
from utils import format_status

PROMPT = "allocator> "
VALID_COMMANDS = "RQ, RL, C, STAT, X"


class Shell:
    def __init__(self, engine: MemoryEngine, out=None, trace: bool = False):
        self.engine = engine
        self.out = out if out is not None else sys.stdout
        self.trace = trace

    def write(self, message: str):
        print(message, file=self.out)

    def execute(self, line: str) -> bool:
        """Run one command line; returns False once the loop should stop."""
        tokens = line.split()
        if not tokens or tokens[0].startswith("#"):
            return True

        command, args = tokens[0], tokens[1:]
        if command == "X":
            return False

        handler = {
            "RQ": self._request,
            "RL": self._release,
            "C": self._compact,
            "STAT": self._status,
        }.get(command)

        if handler is None:
            self.write(f"Unrecognized command. Valid commands: {VALID_COMMANDS}")
            return True

        seen = len(self.engine.event_log)
        try:
            handler(args)
        except AllocatorError as e:
            self.write(str(e))

        if self.trace:
            for event in self.engine.event_log[seen:]:
                self.write(f"  {event}")
        return True

    # -----------------------------
    # Commands
    # -----------------------------
    def _request(self, args: List[str]):
        usage = "Invalid RQ command format. Use: RQ <ProcessID> <Space> <Algorithm>"
        if len(args) != 3:
            self.write(usage)
            return

        pid, size_text, strategy = args
        size = parse_positive_int(size_text)
        if size is None:
            self.write(f"{usage} (Space must be a positive integer)")
            return
        if pid == FREE_LABEL:
            self.write(f"Process ID {FREE_LABEL} is reserved.")
            return
        if strategy not in FitStrategy.NAMES:
            self.write("Invalid algorithm. Use 'F' for First Fit, 'B' for Best Fit, or 'W' for Worst Fit.")
            return

        self.engine.allocate(pid, size, strategy)

    def _release(self, args: List[str]):
        if len(args) != 1:
            self.write("Invalid RL command format. Use: RL <ProcessID>")
            return
        self.engine.release(args[0])

    def _compact(self, args: List[str]):
        if args:
            self.write("Invalid C command format. Use: C")
            return
        self.engine.compact()

    def _status(self, args: List[str]):
        if args:
            self.write("Invalid STAT command format. Use: STAT")
            return
        for line in format_status(self.engine.free_space, self.engine.report()):
            self.write(line)

    # -----------------------------
    # Loop
    # -----------------------------
    def run(self, stream, prompt: Optional[str] = PROMPT):
        while True:
            if prompt:
                self.out.write(prompt)
                self.out.flush()
            line = stream.readline()
            if not line:
                break
            if not self.execute(line):
                break


def parse_positive_int(text) -> Optional[int]:
    try:
        value = int(text)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def capacity_type(text):
    value = parse_positive_int(text)
    if value is None:
        raise argparse.ArgumentTypeError(f"invalid initial memory size: {text!r}")
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog="allocator",
        description="Simulate a contiguous memory allocator",
    )
    parser.add_argument("capacity", type=capacity_type,
                        help="Size of the address space in bytes")
    parser.add_argument("--script", type=str,
                        help="Read commands from a file instead of stdin")
    parser.add_argument("--prompt", type=str, default=PROMPT,
                        help="Prompt printed before each command")
    parser.add_argument("--no-prompt", action="store_true",
                        help="Do not print a prompt")
    parser.add_argument("--trace", action="store_true",
                        help="Echo engine events after each command")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        engine = MemoryEngine(args.capacity)
    except AllocatorError as e:
        print(e, file=sys.stderr)
        return 1

    shell = Shell(engine, trace=args.trace)
    prompt = None if args.no_prompt else args.prompt

    if args.script:
        try:
            with open(args.script) as f:
                shell.run(f, prompt=None)
        except OSError as e:
            print(f"Cannot read script: {e}", file=sys.stderr)
            return 1
    else:
        shell.run(sys.stdin, prompt=prompt)
    return 0


if __name__ == "__main__":
    sys.exit(main())
