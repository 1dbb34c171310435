"""Locate the Compose stack and its ``.env`` file."""

from __future__ import annotations

import shutil
from pathlib import Path

from devtool.constants import ENV_FILE, EXAMPLE_ENV_FILE, STACK_MARKER_DIR
from devtool.exceptions import ConfigurationError, OperationAborted
from devtool.logging import get_logger
from devtool.prompts import Prompter

logger = get_logger(__name__)


def _search_roots(start: Path | None) -> list[Path]:
    base = start or Path(".")
    return [base, base / ".."]


def find_env_path(filename: str = ENV_FILE, start: Path | None = None) -> Path | None:
    """Return ``filename`` from the working directory or its parent, if present."""
    for root in _search_roots(start):
        candidate = root / filename
        if candidate.exists():
            return candidate
    return None


def find_project_root(start: Path | None = None) -> Path | None:
    """Return the first directory (working directory, then parent) holding ``docker/``."""
    for root in _search_roots(start):
        if (root / STACK_MARKER_DIR).is_dir():
            return root
    return None


def ensure_env_file(
    prompter: Prompter,
    *,
    start: Path | None = None,
    assume_yes: bool = False,
) -> Path:
    """Return the stack's ``.env``, creating it from ``env.example`` when missing.

    A freshly copied file holds only defaults, so the user is asked whether to
    go on with them or stop and edit it first.
    """
    env_path = find_env_path(ENV_FILE, start)
    if env_path is not None:
        logger.info("envfile.found", path=str(env_path))
        return env_path

    example_path = find_env_path(EXAMPLE_ENV_FILE, start)
    if example_path is None:
        raise ConfigurationError(
            f"Neither {ENV_FILE} nor {EXAMPLE_ENV_FILE} was found. Check the project layout.",
            error_code="env_file_missing",
            details={"searched": [str(root.resolve()) for root in _search_roots(start)]},
        )

    env_path = example_path.with_name(ENV_FILE)
    shutil.copyfile(example_path, env_path)
    print(f"Copied {example_path} to {env_path}")

    if assume_yes:
        return env_path

    print("The .env configuration file was created with the default values.")
    if prompter.confirm("Continue with the default .env configuration?"):
        return env_path
    raise OperationAborted(
        "Edit the .env file and run the command again.",
        error_code="env_review_requested",
        details={"path": str(env_path)},
    )
