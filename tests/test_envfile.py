"""Tests for locating the stack and bootstrapping its .env file."""

import pytest
from conftest import ScriptedInput

from devtool.envfile import ensure_env_file, find_env_path, find_project_root
from devtool.exceptions import ConfigurationError, OperationAborted
from devtool.prompts import Prompter


@pytest.fixture
def nested(tmp_path):
    """Stack root with a tool directory one level below it."""
    child = tmp_path / "laravel-maker"
    child.mkdir()
    return tmp_path, child


def test_find_env_prefers_current_directory(nested):
    root, child = nested
    (root / ".env").write_text("A=1\n")
    (child / ".env").write_text("A=2\n")

    assert find_env_path(start=child) == child / ".env"


def test_find_env_falls_back_to_parent(nested):
    root, child = nested
    (root / ".env").write_text("A=1\n")

    found = find_env_path(start=child)

    assert found is not None
    assert found.resolve() == (root / ".env").resolve()


def test_find_env_missing(nested):
    _root, child = nested
    assert find_env_path(start=child) is None


def test_find_project_root_in_parent(nested):
    root, child = nested
    (root / "docker").mkdir()

    found = find_project_root(start=child)

    assert found is not None
    assert found.resolve() == root.resolve()


def test_find_project_root_ignores_plain_files(nested):
    root, child = nested
    (root / "docker").write_text("not a directory")
    assert find_project_root(start=child) is None


def test_existing_env_is_returned_without_questions(tmp_path):
    (tmp_path / ".env").write_text("CONTAINER_NAME=x\n")
    answers = ScriptedInput([])

    assert ensure_env_file(Prompter(answers), start=tmp_path) == tmp_path / ".env"
    assert answers.questions == []


def test_env_is_copied_from_example_and_confirmed(nested):
    root, child = nested
    (root / "env.example").write_text("CONTAINER_NAME=dev_container\n")
    answers = ScriptedInput(["maybe", ""])
    errors = []

    class Errors:
        def write(self, text):
            errors.append(text)

        def flush(self):
            pass

    env_path = ensure_env_file(Prompter(answers, error_stream=Errors()), start=child)

    assert env_path.resolve() == (root / ".env").resolve()
    assert (root / ".env").read_text() == "CONTAINER_NAME=dev_container\n"
    assert len(answers.questions) == 2
    assert any("Invalid choice" in text for text in errors)


def test_declining_defaults_aborts(tmp_path):
    (tmp_path / "env.example").write_text("CONTAINER_NAME=dev_container\n")

    with pytest.raises(OperationAborted):
        ensure_env_file(Prompter(ScriptedInput(["n"])), start=tmp_path)

    # The copy is kept so the user can edit it.
    assert (tmp_path / ".env").exists()


def test_assume_yes_skips_question(tmp_path):
    (tmp_path / "env.example").write_text("DB_PORT=3306\n")

    env_path = ensure_env_file(Prompter(ScriptedInput([])), start=tmp_path, assume_yes=True)

    assert env_path == tmp_path / ".env"


def test_missing_example_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError) as exc_info:
        ensure_env_file(Prompter(ScriptedInput([])), start=tmp_path)

    assert exc_info.value.error_code == "env_file_missing"
