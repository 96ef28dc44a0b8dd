"""CLI entrypoints for documate commands."""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path
from typing import Callable, Dict

from .cancellation import CancellationToken
from .config import ConfigError, DocumateConfig, load_config
from .errors import OperationCancelled, PipelineError
from .logging import configure_logging
from .orchestrator import Orchestrator, RunSummary

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "prompt": "Enter your project path: ",
        "success": "Documentation generated for {project}: {uploaded} files uploaded, {skipped} skipped",
        "failure": "An error occurred while generating documentation: {message}",
        "cancelled": "Documentation generation cancelled",
        "no_input": "No project path provided",
    },
    "ru": {
        "prompt": "Введите путь к проекту: ",
        "success": "Документация для {project} сгенерирована: загружено файлов {uploaded}, пропущено {skipped}",
        "failure": "В процессе генерации документации произошла ошибка: {message}",
        "cancelled": "Генерация документации отменена",
        "no_input": "Путь к проекту не указан",
    },
}


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_config_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Path to documate.yml (defaults to $DOCUMATE_CONFIG or ./documate.yml).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="documate",
        description="Generate Markdown documentation for C# projects with a language model.",
    )
    _add_verbose_option(parser)
    _add_config_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Document every source file of a project and publish the results.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_config_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Path to the project root (prompted for when omitted).",
    )
    generate_parser.add_argument(
        "--locale",
        choices=sorted(MESSAGES),
        default=None,
        help="Language of the final status message.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing documentation runs.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(
    argv: list[str] | None = None,
    *,
    orchestrator_factory: Callable[[DocumateConfig], Orchestrator] = Orchestrator,
) -> None:
    """CLI entrypoint for documate commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    configure_logging(verbose=bool(args.verbose), log_file=config.log_file)

    if args.command == "generate":
        locale = getattr(args, "locale", None) or config.locale
        messages = MESSAGES.get(locale, MESSAGES["en"])
        path = args.path or _prompt_for_path(messages)
        if path is None:
            parser.exit(1, f"{messages['no_input']}\n")
        summary = _run_generate(parser, orchestrator_factory(config), path, messages)
        print(
            messages["success"].format(
                project=summary.project,
                uploaded=len(summary.uploaded),
                skipped=len(summary.skipped),
            )
        )
    elif args.command == "serve":
        from .service.app import run_service

        run_service(config, host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _prompt_for_path(messages: Dict[str, str]) -> str | None:
    try:
        path = input(messages["prompt"])
        while not path.strip():
            path = input()
    except EOFError:
        return None
    return path.strip()


def _run_generate(
    parser: argparse.ArgumentParser,
    orchestrator: Orchestrator,
    path: str,
    messages: Dict[str, str],
) -> RunSummary:
    token = CancellationToken()

    def _cancel(signum: int, frame: object) -> None:
        token.cancel("interrupted")

    previous = signal.signal(signal.SIGINT, _cancel)
    try:
        return orchestrator.run(path, token)
    except OperationCancelled:
        parser.exit(130, f"{messages['cancelled']}\n")
    except PipelineError as exc:
        parser.exit(1, messages["failure"].format(message=exc.error.message) + "\n")
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)


if __name__ == "__main__":
    main(sys.argv[1:])
