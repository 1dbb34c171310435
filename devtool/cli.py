"""Command line entry point: ``devtool run``, ``devtool containers`` and ``devtool new``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from devtool.constants import EXIT_INTERRUPTED, LOG_LEVELS
from devtool.dispatcher import CommandDispatcher, matching_containers, select_container
from devtool.envfile import ensure_env_file, find_env_path, find_project_root
from devtool.exceptions import (
    AmbiguousContainerError,
    ConfigurationError,
    DevtoolException,
    RuntimeUnavailableError,
)
from devtool.logging import configure_logging, get_logger
from devtool.project import LaravelProjectBuilder, collect_project_input
from devtool.prompts import Prompter
from devtool.runtime import DockerRuntime, LocalRuntime
from devtool.settings import DevtoolSettings, load_settings
from devtool.tooling import SUPPORTED_TOOLS, Role

logger = get_logger(__name__)

_OPTIONS_WITH_VALUE = ("--env-file", "--log-level")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devtool",
        allow_abbrev=False,
        description="Run PHP and Node tooling inside the local Docker development stack.",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to the stack's .env file (default: ./.env, then ../.env)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: LOG_LEVEL from the environment, else WARNING)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines on standard error",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Run a tool in its container, or on the host when none is running",
    )
    run_parser.add_argument("tool", choices=SUPPORTED_TOOLS, help="Tool to run")
    run_parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments forwarded verbatim to the tool",
    )

    subparsers.add_parser("containers", help="Show which container each role resolves to")

    new_parser = subparsers.add_parser("new", help="Create a new Laravel project in the stack")
    new_parser.add_argument("--name", default=None, help="Project name (prompted when omitted)")
    new_parser.add_argument(
        "--laravel-version",
        default=None,
        help="Laravel major version (prompted when omitted)",
    )
    new_parser.add_argument(
        "--yes",
        action="store_true",
        help="Accept a freshly created .env without asking",
    )
    return parser


def _split_tool_arguments(argv: list[str]) -> tuple[list[str], list[str] | None]:
    """Split ``run <tool>`` off ``argv`` so the tool's own arguments skip argparse.

    argparse drops a leading ``--`` from a ``REMAINDER`` positional, which the
    tools rely on (``npx -- vite``, ``php script.php -- -x``).
    """
    index = 0
    while index < len(argv):
        token = argv[index]
        if token in _OPTIONS_WITH_VALUE:
            index += 2
            continue
        if token.startswith("-"):
            index += 1
            continue
        if token == "run" and index + 1 < len(argv):
            return argv[: index + 2], argv[index + 2 :]
        break
    return argv, None


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    head, forwarded = _split_tool_arguments(list(sys.argv[1:] if argv is None else argv))
    args = build_parser().parse_args(head)
    if forwarded is not None:
        args.args = forwarded
    return args


def _build_runtime(settings: DevtoolSettings) -> DockerRuntime:
    return DockerRuntime(binary=settings.container_runtime)


def _build_dispatcher(settings: DevtoolSettings) -> CommandDispatcher:
    return CommandDispatcher(
        _build_runtime(settings),
        LocalRuntime(),
        base_name=settings.container_name,
        policy=settings.container_selection,
    )


def _load_settings(env_file: str | None) -> DevtoolSettings:
    if env_file is not None:
        path = Path(env_file).expanduser()
        if not path.exists():
            raise ConfigurationError(
                f"Environment file not found: {path}",
                error_code="env_file_missing",
                details={"path": str(path)},
            )
        return load_settings(path)
    return load_settings(find_env_path())


def _run_tool(args: argparse.Namespace, settings: DevtoolSettings) -> int:
    dispatcher = _build_dispatcher(settings)
    return dispatcher.dispatch(args.tool, args.args)


def _show_containers(settings: DevtoolSettings) -> int:
    try:
        names = _build_runtime(settings).list_running_containers()
    except RuntimeUnavailableError as exc:
        print(f"Container runtime unavailable: {exc.message}")
        return 1
    for role in Role:
        candidates = matching_containers(names, role)
        try:
            container = select_container(
                candidates,
                role,
                configured_name=settings.container_for(role),
                policy=settings.container_selection,
            )
        except AmbiguousContainerError:
            print(f"{role.value:<6} ambiguous ({', '.join(candidates)})")
            continue
        print(f"{role.value:<6} {container or 'host'}")
    return 0


def _create_project(args: argparse.Namespace) -> int:
    prompter = Prompter()
    print("--- Laravel project scaffolding ---")
    if args.env_file is not None:
        env_path = Path(args.env_file).expanduser()
    else:
        env_path = ensure_env_file(prompter, assume_yes=args.yes)
    settings = load_settings(env_path)
    project_root = find_project_root()
    if project_root is None:
        raise ConfigurationError(
            "Could not find the stack root (a directory containing docker/) here or in the parent directory.",
            error_code="stack_root_missing",
        )
    print(f"Configuration loaded (PHP container: {settings.php_container_name}, Apache port: {settings.server_port})")

    project = collect_project_input(prompter, project_root, name=args.name, version=args.laravel_version)
    builder = LaravelProjectBuilder(_build_runtime(settings), settings, project_root)
    builder.build(project)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level or "WARNING", json_output=args.json_logs)

    try:
        settings = _load_settings(args.env_file)
        # Settings only fill in what the command line left unspecified.
        configure_logging(
            args.log_level or settings.log_level,
            json_output=args.json_logs or settings.log_json_output,
        )
        if args.command == "run":
            return _run_tool(args, settings)
        if args.command == "containers":
            return _show_containers(settings)
        return _create_project(args)
    except DevtoolException as exc:
        # "message" is reserved on LogRecord, so the payload is logged field by field.
        payload = exc.to_dict()
        logger.error("devtool.failed", error=payload["error"], reason=payload["message"], details=payload["details"])
        return 1
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
