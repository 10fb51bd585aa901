"""
`scaffold-merge` command line.

Commands
--------
scaffold-merge context OLD NEW              -- carry OnModelCreating customizations into NEW
scaffold-merge context OLD NEW -o OUT       -- write the merged file to OUT instead
scaffold-merge extract OLD                  -- print what would be carried over
scaffold-merge diff OLD_DIR NEW_DIR         -- property changes between two model dirs (JSON)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from .cli_display import setup_logger, show_merge_result
from .config import Config
from .engine.carry_over import extract_carry_over
from .engine.errors import MergeError
from .workflow import diff_model_directories, merge_context_files, read_source

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------

def _load_config(args: argparse.Namespace) -> Config:
    cfg = Config.load(args.config)
    if getattr(args, "strict", False):
        cfg.STRICT_SINGLE_METHOD = True
    return cfg


def _cmd_context(args: argparse.Namespace) -> int:
    """Merge the old context's carry-over into the regenerated context."""
    cfg = _load_config(args)
    try:
        result = merge_context_files(args.old, args.new, args.output, cfg)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read or write context file: {exc}", file=sys.stderr)
        return 1

    show_merge_result(result, args.output or args.new)
    return 0 if result.success else 1


def _cmd_extract(args: argparse.Namespace) -> int:
    """Print the statements that would be carried over from OLD."""
    cfg = _load_config(args)
    try:
        text = read_source(args.old, cfg.ENCODING)
        preserved = extract_carry_over(text, cfg.merge_rules(), args.old)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read {args.old}: {exc}", file=sys.stderr)
        return 1
    except MergeError as exc:
        print(f"Cannot extract from {args.old}: {exc}", file=sys.stderr)
        return 1

    if preserved:
        print(preserved)
    return 0


def _cmd_diff(args: argparse.Namespace) -> int:
    """Diff the model files of two scaffold runs and dump the change set."""
    cfg = _load_config(args)
    if args.context_file:
        cfg.CONTEXT_FILE = args.context_file
    try:
        report = diff_model_directories(
            args.old_dir, args.new_dir, cfg, progress=sys.stderr.isatty(),
        )
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read model file: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(report.to_dict(), indent=2))
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scaffold-merge",
        description="Preserve OnModelCreating customizations across EF Core re-scaffolds",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .scaffoldmerge.yaml config file")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Echo debug logging to the console")
    subparsers = parser.add_subparsers(dest="cmd", metavar="COMMAND")
    subparsers.required = True

    # --- context ---
    context_p = subparsers.add_parser(
        "context", help="Merge carry-over from the old context into the new one",
    )
    context_p.add_argument("old", help="Context file before regeneration")
    context_p.add_argument("new", help="Freshly generated context file")
    context_p.add_argument("-o", "--output", default=None,
                           help="Write the merged file here (default: overwrite NEW)")
    context_p.add_argument("--strict", action="store_true",
                           help="Fail if more than one matching method signature exists")
    context_p.set_defaults(func=_cmd_context)

    # --- extract ---
    extract_p = subparsers.add_parser(
        "extract", help="Print the statements that would be carried over",
    )
    extract_p.add_argument("old", help="Context file to read")
    extract_p.add_argument("--strict", action="store_true",
                           help="Fail if more than one matching method signature exists")
    extract_p.set_defaults(func=_cmd_extract)

    # --- diff ---
    diff_p = subparsers.add_parser(
        "diff", help="Property changes between two model directories",
    )
    diff_p.add_argument("old_dir", help="Model directory before regeneration")
    diff_p.add_argument("new_dir", help="Model directory after regeneration")
    diff_p.add_argument("--context-file", dest="context_file", default=None,
                        help="File name of the context to skip (auto-detected otherwise)")
    diff_p.set_defaults(func=_cmd_diff)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the ``scaffold-merge`` console script."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR, verbose=args.verbose)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
