#!/usr/bin/env python3
"""structmatch/main.py: CLI entry-point for structmatch.

Usage examples
--------------
    # List the catalog of conventional field roles
    python -m structmatch roles

    # Does a type carry object metadata and a spec?
    python -m structmatch check model.json example.org/api/v1.Widget \\
        --role object-meta --role spec

    # Classify every declared type against every role
    python -m structmatch scan model.json --format json

Exit codes
----------
    0   Success (for ``check``: the type matched).
    1   ``check`` only: the type did not match.
    2   Infrastructure failure (missing file, malformed model, bad config).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from structmatch import __version__
from structmatch.catalog import ROLES
from structmatch.config import MatchConfig, parse_mode
from structmatch.errors import ConfigError, StructMatchError
from structmatch.matchers import TypeMatchMode, has
from structmatch.model import TypeUniverse, load_model
from structmatch.resolver import find_struct

_log = logging.getLogger("structmatch")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_NO_MATCH: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``structmatch`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("structmatch")
    root.setLevel(level)
    root.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream (``None`` or ``"-"`` → stdout)."""
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _mode_arg(raw: str) -> TypeMatchMode:
    try:
        return parse_mode(raw)
    except ConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _config_from_args(args: argparse.Namespace) -> MatchConfig:
    config = MatchConfig.from_env().with_overrides(
        type_match_mode=args.type_match_mode,
        strict_model=True if args.strict_model else None,
        roles=tuple(args.role) if getattr(args, "role", None) else None,
    )
    for warning in config.validate():
        _log.warning("configuration: %s", warning)
    return config


def _load(args: argparse.Namespace, config: MatchConfig) -> TypeUniverse:
    _log.info("Loading type model: %s", args.model)
    return load_model(args.model, strict=config.strict_model)


# ===========================================================================
# Sub-command implementations
# ===========================================================================

def cmd_roles(args: argparse.Namespace) -> int:
    """Print the catalog of field roles."""
    out = _open_output(args.output)
    try:
        for role in ROLES.values():
            if args.format == "json":
                out.write(json.dumps({
                    "role": role.role,
                    "field": role.field_name,
                    "type_suffix": role.type_suffix,
                    "summary": role.summary,
                }) + "\n")
            else:
                suffix = role.type_suffix or "-"
                out.write(
                    f"{role.role:<34} {role.field_name:<30} {suffix}\n"
                )
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Check one declared type against the requested roles."""
    config = _config_from_args(args)
    universe = _load(args, config)
    t = universe.lookup(args.type_name)
    matched = has(t, *config.matchers().values())
    _log.info("%s: %s", args.type_name, "match" if matched else "no match")
    print("yes" if matched else "no")
    return EXIT_OK if matched else EXIT_NO_MATCH


def cmd_scan(args: argparse.Namespace) -> int:
    """Evaluate every declared type against each configured role."""
    config = _config_from_args(args)
    universe = _load(args, config)
    matchers = config.matchers()

    out = _open_output(args.output)
    try:
        for t in universe:
            is_struct = find_struct(t) is not None
            roles: List[str] = [
                r for r, m in matchers.items() if is_struct and has(t, m)
            ]
            if args.format == "json":
                out.write(json.dumps({
                    "type": t.name,
                    "struct": is_struct,
                    "roles": roles,
                }) + "\n")
            else:
                out.write(f"{t.name}\t{','.join(roles) or '-'}\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="structmatch",
        description=(
            "Structural field matching over declared type models.\n\n"
            "Answers whether declared types carry conventional fields\n"
            "such as TypeMeta, ObjectMeta, Spec or Status."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              structmatch roles
              structmatch check model.json example.org/api/v1.Widget --role spec
              structmatch scan  model.json -f json
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    parser.add_argument(
        "--type-match-mode",
        type=_mode_arg,
        default=None,
        metavar="{" + ",".join(m.value for m in TypeMatchMode) + "}",
        help="How field types are compared (default: suffix).",
    )
    parser.add_argument(
        "--strict-model",
        action="store_true",
        help="Reject models that reference undeclared types.",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_output_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-o", "--output",
            default=None,
            metavar="FILE",
            help='Output file ("-" or omit for stdout).',
        )
        p.add_argument(
            "-f", "--format",
            choices=["text", "json"],
            default="text",
            help="Output format (default: text).",
        )

    def _add_role_args(p: argparse.ArgumentParser, required: bool) -> None:
        p.add_argument(
            "-r", "--role",
            action="append",
            choices=list(ROLES),
            required=required,
            metavar="ROLE",
            help="Catalog role to match (repeatable).",
        )

    # --- roles -------------------------------------------------------------
    p_roles = subparsers.add_parser(
        "roles",
        help="List the catalog of conventional field roles.",
    )
    _add_output_args(p_roles)
    p_roles.set_defaults(func=cmd_roles)

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Check one declared type against catalog roles.",
        description=(
            "Exit 0 and print 'yes' if every role is satisfied by some "
            "field of TYPE; exit 1 and print 'no' otherwise."
        ),
    )
    p_check.add_argument("model", help="JSON type-model document.")
    p_check.add_argument("type_name", metavar="TYPE",
                         help="Qualified name of the declared type.")
    _add_role_args(p_check, required=True)
    p_check.set_defaults(func=cmd_check)

    # --- scan --------------------------------------------------------------
    p_scan = subparsers.add_parser(
        "scan",
        help="Classify every declared type in a model.",
    )
    p_scan.add_argument("model", help="JSON type-model document.")
    _add_role_args(p_scan, required=False)
    _add_output_args(p_scan)
    p_scan.set_defaults(func=cmd_scan)

    return parser


# ===========================================================================
# Main
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the structmatch CLI and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except StructMatchError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
