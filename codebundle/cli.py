#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from codebundle.core.bundle import (
    BundleOptions,
    BundlePathError,
    bundle_files,
)
from codebundle.core.languages import LANGUAGE_EXTENSIONS, split_language_tokens
from codebundle.core.response_file import create_response_file
from codebundle.core.selection import parse_sort_mode
from codebundle.utils.config import (
    DEFAULT_OUTPUT,
    DEFAULT_SORT,
    LOG_DIR_ENV,
    BundleDefaults,
    load_bundle_defaults,
)
from codebundle.utils.logging import (
    JsonlLogger,
    configure_stderr_logging,
    log_runtime_environment,
    resolve_log_dir,
)


# ------------------------
# Argument helpers
# ------------------------

_TRUE = {"true", "yes", "y", "1", "on"}
_FALSE = {"false", "no", "n", "0", "off"}


def _parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got '{value}'")


class ResponseFileArgumentParser(argparse.ArgumentParser):
    """
    ArgumentParser that reads ``@file`` lines as ``--flag value``.

    Everything after the flag is a single value, so ``--author Ada Lovelace``
    stays one argument and ``--author -anon-`` is not mistaken for a flag.
    Lines without a leading dash are split on whitespace.
    """

    def convert_arg_line_to_args(self, arg_line: str) -> List[str]:
        line = arg_line.strip()
        if not line:
            return []
        if line.startswith("-"):
            parts = line.split(None, 1)
            if len(parts) == 1:
                return parts
            # Bind the value to its flag so values starting with "-" survive.
            return [f"{parts[0]}={parts[1]}"]
        return line.split()


# ------------------------
# Commands
# ------------------------


def _resolve_options(args: argparse.Namespace, defaults: BundleDefaults) -> BundleOptions:
    raw_languages = args.language if args.language else defaults.language
    languages = tuple(split_language_tokens(raw_languages))

    output = args.output or defaults.output or DEFAULT_OUTPUT
    sort = args.sort if args.sort is not None else (defaults.sort or DEFAULT_SORT)
    note = args.note if args.note is not None else bool(defaults.note)
    remove_empty_lines = (
        args.remove_empty_lines
        if args.remove_empty_lines is not None
        else bool(defaults.remove_empty_lines)
    )
    author = args.author if args.author is not None else defaults.author

    return BundleOptions(
        languages=languages,
        output=Path(output),
        note=note,
        sort=parse_sort_mode(sort),
        remove_empty_lines=remove_empty_lines,
        author=author or None,
    )


def run_bundle(args: argparse.Namespace) -> int:
    workdir = Path.cwd()
    logger = JsonlLogger(resolve_log_dir(args.log_dir))
    exit_code = 1
    try:
        log_runtime_environment(logger, command="bundle", workdir=workdir)

        defaults = BundleDefaults()
        if args.config:
            defaults = load_bundle_defaults(args.config)
            logger.info("Config file loaded.", path=args.config)

        if not args.language and not defaults.language:
            args.bundle_parser.error("At least one language must be specified.")

        options = _resolve_options(args, defaults)
        logger.phase_start(
            "bundle",
            languages=list(options.languages),
            output=options.output,
            note=options.note,
            sort=options.sort.value,
            remove_empty_lines=options.remove_empty_lines,
            author=options.author,
        )
        result = bundle_files(options, workdir, logger)
        logger.phase_end("bundle", output=result.output, files=len(result.files))

        print(f"Files have been successfully bundled into {result.output}")
        exit_code = 0
    except BundlePathError as exc:
        logger.error("Output path is not valid.", path=exc.path)
        print("ERROR: File path is not valid", file=sys.stderr)
    except Exception as exc:
        logger.error("Bundle failed.", error=str(exc), exc_info=True)
        print(f"An error occurred: {exc}", file=sys.stderr)
    finally:
        logger.close()

    return exit_code


def run_create_rsp(args: argparse.Namespace) -> int:
    workdir = Path.cwd()
    with JsonlLogger(resolve_log_dir(args.log_dir)) as logger:
        try:
            path = create_response_file(workdir)
        except OSError as exc:
            logger.error("Response file could not be written.", error=str(exc))
            print(f"An error occurred: {exc}", file=sys.stderr)
            return 1
        if path is None:
            logger.warning("Response file aborted: no languages given.")
            return 1
        logger.info("Response file written.", path=path)
    return 0


# ------------------------
# CLI entrypoint
# ------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = ResponseFileArgumentParser(
        prog="codebundle",
        description="A tool to bundle the contents of a few files into one file",
        fromfile_prefix_chars="@",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug detail).",
    )
    parser.add_argument(
        "--log-dir",
        dest="log_dir",
        default=None,
        help=f"Append structured events to LOG_DIR/events.jsonl (default: ${LOG_DIR_ENV}).",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    bp = subparsers.add_parser(
        "bundle",
        aliases=["b"],
        help="Combines the contents of a few files into one file",
    )
    bp.add_argument(
        "--language",
        "-l",
        nargs="+",
        action="extend",
        default=None,
        help=(
            "Programming languages to include ("
            + ", ".join(LANGUAGE_EXTENSIONS)
            + "). Use 'all' to include all code files."
        ),
    )
    bp.add_argument(
        "--output",
        "-o",
        default=None,
        help=f"File path and name (default: {DEFAULT_OUTPUT}).",
    )
    bp.add_argument(
        "--note",
        "-n",
        nargs="?",
        const=True,
        default=None,
        type=_parse_bool,
        help="Include a comment with the source file's relative path before each file content.",
    )
    bp.add_argument(
        "--sort",
        "-s",
        default=None,
        help="Sort order for files: 'name' (default) or 'type'.",
    )
    bp.add_argument(
        "--remove-empty-lines",
        "-rel",
        dest="remove_empty_lines",
        nargs="?",
        const=True,
        default=None,
        type=_parse_bool,
        help="Remove empty lines from code files before bundling.",
    )
    bp.add_argument(
        "--author",
        "-a",
        default=None,
        help="Author name to put at the top of the bundle file.",
    )
    bp.add_argument(
        "--config",
        "-c",
        default=None,
        help="YAML or JSON file with default values for the options above.",
    )
    bp.set_defaults(func=run_bundle, bundle_parser=bp)

    rp = subparsers.add_parser(
        "create-rsp",
        aliases=["c-rsp"],
        help="Create a response file for bundling files",
    )
    rp.set_defaults(func=run_create_rsp)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_stderr_logging(args.verbose)
    if hasattr(args, "func"):
        return int(args.func(args))
    return 1


if __name__ == "__main__":
    sys.exit(main())
