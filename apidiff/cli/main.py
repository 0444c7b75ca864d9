import argparse
import logging
import sys

from apidiff._version import _detect_version
from apidiff.cli import diff
from apidiff.cli.exitcodes import EXIT_ENGINE_ERROR
from apidiff.errors import ApiDiffError


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="apidiff", description="apidiff — structural diff of a package's public API")
    p.add_argument("--version", action="version", version=f"%(prog)s {_detect_version()}")
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress and all diagnostics to stderr.")

    sub = p.add_subparsers(dest="cmd", required=True)

    # diff
    diff_p = sub.add_parser("diff", help="Diff a package between two git revisions.")
    diff_p.add_argument("-p", "--package", required=True, help="Package directory, relative to the repository root.")
    diff_p.add_argument(
        "revisions",
        nargs="+",
        metavar="REV",
        help="One revision (working tree vs REV) or two (REV1 vs REV2).",
    )
    diff_p.add_argument("--repo", default=".", help="Repository root (default: .)")
    diff_p.add_argument("--config", default=None, help="Config file (default: apidiff.yaml in the repository root).")
    diff_p.add_argument("--frontend", default=None, help="Front-end id (default: auto-detect).")
    diff_p.add_argument("--method-limit", dest="method_limit", type=_positive_int, default=None, help="Max method lines per type.")

    # symbols
    sym_p = sub.add_parser("symbols", help="Diff two symbol table files (YAML/JSON).")
    sym_p.add_argument("old", help="Symbol table of the old version.")
    sym_p.add_argument("new", help="Symbol table of the new version.")
    sym_p.add_argument("--package", default=None, help="Package to pick when a file holds several.")
    sym_p.add_argument("--method-limit", dest="method_limit", type=_positive_int, default=None, help="Max method lines per type.")

    return p


def configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger("apidiff")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.cmd == "diff" and len(args.revisions) > 2:
        parser.error("diff takes one or two revisions")

    try:
        if args.cmd == "diff":
            return diff.revisions_diff(
                repo=args.repo,
                package=args.package,
                revisions=args.revisions,
                config_path=args.config,
                frontend=args.frontend,
                method_limit=args.method_limit,
            )

        if args.cmd == "symbols":
            return diff.symbols_diff(
                old=args.old,
                new=args.new,
                package=args.package,
                method_limit=args.method_limit,
            )

        print("Unknown command.", file=sys.stderr)
        return EXIT_ENGINE_ERROR

    except (ApiDiffError, OSError) as e:
        print(f"apidiff: error: {e}", file=sys.stderr)
        return EXIT_ENGINE_ERROR


if __name__ == "__main__":
    sys.exit(main())
