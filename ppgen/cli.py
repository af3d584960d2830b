"""
Command-line interface.

    ppgen generate                       # dry run, prints the generator report
    ppgen enroll --store FILE --user ID  # save partial hashes for a user
    ppgen challenge --store FILE --user ID
    ppgen login --store FILE --user ID [--pattern N]
"""
from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from .config import (
    DEFAULT_CONFIG,
    REPEAT_DROP_RATES,
    PartialPassConfig,
    PartialPassConfigError,
    normalize_mapping,
)
from .logging_config import setup_logging
from .render import active_slots, render_challenge
from .service import PartialPasswordService
from .store import FilePatternStore, PatternStoreError

logger = logging.getLogger(__name__)

# Config fields that can be overridden from the command line
_OVERRIDES = (
    "bits_range",
    "characters_min",
    "characters_max",
    "passwords_min",
    "passwords_max",
    "repeat_drop_rate",
    "encoding",
    "max_collision_retries",
)


def load_config(args: argparse.Namespace) -> PartialPassConfig:
    """
    Start from DEFAULT_CONFIG, apply the JSON file given with --config,
    then any explicit command line overrides.
    """
    values = DEFAULT_CONFIG.as_dict()
    if args.config:
        try:
            data = json.loads(Path(args.config).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PartialPassConfigError(f"Cannot read config file {args.config}.") from exc
        if not isinstance(data, dict):
            raise PartialPassConfigError("Config file must contain a JSON object.")
        values.update(normalize_mapping(data))

    for name in _OVERRIDES:
        value = getattr(args, name, None)
        if value is not None:
            values[name] = value
    return PartialPassConfig(**values)


def build_parser() -> argparse.ArgumentParser:
    # No abbreviations: "generate --password" must not be read as a
    # prefix of the global --passwords-min / --passwords-max options.
    parser = argparse.ArgumentParser(
        prog="ppgen",
        description="Partial password hash generator",
        allow_abbrev=False,
    )
    parser.add_argument("--log-level", type=str, default="warning",
                        choices=["debug", "info", "warning", "error", "critical"],
                        help="Log level to use")
    parser.add_argument("--log-dir", type=str,
                        help="Also write logs to a daily file in this directory")
    parser.add_argument("--config", type=str,
                        help="JSON file with generator options")
    parser.add_argument("--bits-range", dest="bits_range", type=int)
    parser.add_argument("--characters-min", dest="characters_min", type=int)
    parser.add_argument("--characters-max", dest="characters_max", type=int)
    parser.add_argument("--passwords-min", dest="passwords_min", type=int)
    parser.add_argument("--passwords-max", dest="passwords_max", type=int)
    parser.add_argument("--repeat-drop-rate", dest="repeat_drop_rate", type=int,
                        choices=REPEAT_DROP_RATES)
    parser.add_argument("--encoding", type=str)
    parser.add_argument("--max-collision-retries", dest="max_collision_retries", type=int)

    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate hashes and print the report")
    gen.add_argument("--password", type=str,
                     help="Password to use (prompted for when omitted)")

    for name, help_text in (
        ("enroll", "Generate and store partial hashes for a user"),
        ("challenge", "Show a random challenge for a user"),
        ("login", "Answer a challenge and validate it"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--store", type=str, help="Pattern store file")
        cmd.add_argument("--user", type=str, required=True, help="User id")
        if name == "enroll":
            cmd.add_argument("--keep-previous", action="store_true",
                             help="Do not delete the user's older hashes")
        if name == "login":
            cmd.add_argument("--pattern", type=int,
                             help="Pattern to answer (random when omitted)")

    return parser


def _read_password(prompt: str = "Password: ") -> str:
    return getpass.getpass(prompt)


def _cmd_generate(service: PartialPasswordService, args: argparse.Namespace,
                  ask: Callable[[str], str]) -> int:
    password = args.password if args.password is not None else ask("Password: ")
    meta = service.generate(password)
    print(json.dumps(meta.report(), indent=2))
    return 0


def _cmd_enroll(service: PartialPasswordService, args: argparse.Namespace,
                ask: Callable[[str], str]) -> int:
    password = ask("Password: ")
    if password != ask("Repeat password: "):
        print("Passwords do not match.", file=sys.stderr)
        return 1
    written = service.save_partial_hashes(
        args.user, password, delete_previous=not args.keep_previous
    )
    print(f"Saved {written} partial password hashes for {args.user}.")
    return 0


def _cmd_challenge(service: PartialPasswordService, args: argparse.Namespace,
                   ask: Callable[[str], str]) -> int:
    pattern = service.get_random_partial_pattern(args.user)
    if pattern is None:
        print(f"No partial passwords stored for {args.user}.", file=sys.stderr)
        return 1
    print(f"Pattern: {pattern}")
    print(render_challenge(pattern, service.config.bits_range))
    return 0


def _cmd_login(service: PartialPasswordService, args: argparse.Namespace,
               ask: Callable[[str], str]) -> int:
    pattern = args.pattern
    if pattern is None:
        pattern = service.get_random_partial_pattern(args.user)
    if pattern is None or not 0 < pattern <= service.config.max_pattern:
        # Same answer as a wrong password.
        print("Rejected.")
        return 1

    bits_range = service.config.bits_range
    print(render_challenge(pattern, bits_range))
    typed = [ask(f"Character {slot}: ") for slot in active_slots(pattern, bits_range)]

    if service.validate_partial_password(args.user, pattern, typed):
        print("Accepted.")
        return 0
    print("Rejected.")
    return 1


_COMMANDS = {
    "generate": _cmd_generate,
    "enroll": _cmd_enroll,
    "challenge": _cmd_challenge,
    "login": _cmd_login,
}


def main(
    argv: Optional[Sequence[str]] = None,
    ask: Callable[[str], str] = _read_password,
) -> int:
    """
    Entry point for the `ppgen` script, `python -m ppgen.cli` or `run_ppgen.py`.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper(), args.log_dir)

    try:
        config = load_config(args)
        store = FilePatternStore(getattr(args, "store", None))
        service = PartialPasswordService(store, config)
        return _COMMANDS[args.command](service, args, ask)
    except (ValueError, PatternStoreError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
