"""
RULEX CLI Entrypoint.

Reads a RULEX document, runs it through the lexer and parser, and prints the
resulting syntax tree (or token stream) as JSON.

Features:
    - Read source from a file or an inline string.
    - Dump either the parsed AST or the raw token stream.
    - Output to console or file, optionally with banner sections.
    - Syntax errors are reported as `error: at (line:col): message` on stderr.

Example usage:
    rulex rules.rx
    rulex -s "rule add(a, b) { a + b }" --indent 4
    rulex rules.rx --tokens -o tokens.json
    RULEX_LOG_LEVEL=DEBUG rulex rules.rx

Functions:
    run_rulex(source: str, is_string: bool = False, tokens: bool = False, out: str | None = None,
              pretty: bool = False, indent: int = 2) -> str:
        Executes the pipeline (read → lex → parse → serialize → output).

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments, configures logging and invokes `run_rulex`.
"""

import argparse
import json
import logging
import os
import sys

from rulex.rulex_ast import to_dict
from rulex.rulex_errors import RulexSyntaxError
from rulex.rulex_lexer import tokenize
from rulex.rulex_parser import parse_source

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "RULEX_LOG_LEVEL"
BANNER = "=" * 35


def run_rulex(
    source: str,
    is_string: bool = False,
    tokens: bool = False,
    out: str | None = None,
    pretty: bool = False,
    indent: int = 2,
) -> str:
    """
    Run the RULEX front end and emit the result as JSON.

    Args:
        source (str): RULEX source code or path to a source file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        tokens (bool): If True, emits the token stream instead of the AST.
        out (str | None): Optional path to write the JSON to. If None, prints to stdout.
        pretty (bool): If True, wraps the raw content and result in banner sections.
        indent (int): JSON indentation width.

    Returns:
        str: The emitted JSON document.

    Raises:
        RulexSyntaxError: If the source is malformed.
        OSError: If the source file cannot be read or the output cannot be written.
        UnicodeDecodeError: If the source file is not valid UTF-8.
    """
    if not is_string:
        logger.debug("Reading source from %s", source)
        with open(source, encoding="utf-8") as f:
            source = f.read()

    if tokens:
        result = [token.to_dict() for token in tokenize(source)]
        title = "TOKENS"
    else:
        result = to_dict(parse_source(source))
        title = "PARSED"

    document = json.dumps(result, indent=indent)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(document + "\n")
        logger.info("Wrote %s to %s", title.lower(), out)
    elif pretty:
        print(f"{'RAW CONTENT':=^35}\n{source}\n{BANNER}")
        print(f"{title:=^35}\n{document}\n{BANNER}")
    else:
        print(document)

    return document


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr at DEBUG if verbose, else at `$RULEX_LOG_LEVEL`."""
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING")
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulex", description="Parse RULEX source into a JSON syntax tree."
    )
    parser.add_argument("source", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Dump the token stream instead of the AST"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show source and result with banners"
    )
    parser.add_argument(
        "--indent", type=int, default=2, help="JSON indentation width (default: 2)"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the RULEX CLI.

    Returns:
        int: 0 on success, 1 on a syntax error or unreadable source.
    """
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        run_rulex(
            source=args.source,
            is_string=args.string,
            tokens=args.tokens,
            out=args.out,
            pretty=args.pretty,
            indent=args.indent,
        )
    except RulexSyntaxError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
