"""CLI entrypoints for uiforge commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .logging import configure_logging
from .models import to_payload
from .parser import RepositoryParser
from .writeback import WriteResult, write_css_change, write_prop_default, write_token_value


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uiforge",
        description="Inspect React component libraries and write style edits back to source.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser(
        "parse",
        help="Print the component, prop and token model of a repository as JSON.",
    )
    _add_verbose_option(parse_parser, suppress_default=True)
    parse_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    parse_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Indentation of the JSON output (0 for compact output).",
    )

    css_parser = subparsers.add_parser(
        "set-css",
        help="Set a CSS property for a selector in a stylesheet.",
    )
    _add_verbose_option(css_parser, suppress_default=True)
    css_parser.add_argument("file", help="Stylesheet to edit.")
    css_parser.add_argument("selector", help="Selector of the rule to edit, e.g. '.button'.")
    css_parser.add_argument("property", help="Property name (kebab-case or camelCase).")
    css_parser.add_argument("value", help="New property value.")
    css_parser.add_argument(
        "--media",
        default=None,
        help="Media query of the rule, e.g. '(max-width: 600px)'.",
    )

    prop_parser = subparsers.add_parser(
        "set-prop",
        help="Set a component's default prop value in the manifest.",
    )
    _add_verbose_option(prop_parser, suppress_default=True)
    prop_parser.add_argument("manifest", help="Path to the manifest file.")
    prop_parser.add_argument("component", help="Component name as listed in the manifest.")
    prop_parser.add_argument("prop", help="Prop name.")
    prop_parser.add_argument("value", help="New default value (parsed as JSON when possible).")

    token_parser = subparsers.add_parser(
        "set-token",
        help="Change the value of a design token in a theme stylesheet.",
    )
    _add_verbose_option(token_parser, suppress_default=True)
    token_parser.add_argument("file", help="Theme stylesheet to edit.")
    token_parser.add_argument("name", help="Token name, with or without the leading '--'.")
    token_parser.add_argument("value", help="New token value.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing parse and writeback operations.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _report(parser: argparse.ArgumentParser, result: WriteResult, target: str) -> None:
    if not result.success:
        parser.exit(1, f"uiforge: {result.error}\n")
    previous = result.previous_value if result.previous_value is not None else "(unset)"
    print(f"Updated {_relativize(Path(target))} ({result.strategy}); previous value: {previous}")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for uiforge commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "parse":
        try:
            model = RepositoryParser().parse(args.path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"uiforge parse failed: {exc}\nRun with --verbose for more details.\n")
        indent = args.indent if args.indent > 0 else None
        print(json.dumps(to_payload(model), indent=indent, ensure_ascii=False))
    elif args.command == "set-css":
        result = write_css_change(args.file, args.selector, args.property, args.value, args.media)
        _report(parser, result, args.file)
    elif args.command == "set-prop":
        result = write_prop_default(args.manifest, args.component, args.prop, _parse_value(args.value))
        _report(parser, result, args.manifest)
    elif args.command == "set-token":
        result = write_token_value(args.file, args.name, args.value)
        _report(parser, result, args.file)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
