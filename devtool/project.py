"""Scaffold a new Laravel project inside the Compose stack."""

from __future__ import annotations

import re
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from devtool.constants import (
    APACHE_SERVICE,
    CONTAINER_START_ATTEMPTS,
    CONTAINER_START_WAIT_SECONDS,
    CONTAINER_WEB_ROOT,
    DEFAULT_LARAVEL_VERSION,
    HOSTS_FILE,
    MINIMAL_LARAVEL_VERSION,
    PROJECT_TLD,
    PROJECTS_DIR,
    VHOSTS_DIR,
)
from devtool.exceptions import (
    ContainerCommandError,
    ContainerStartError,
    HostsUpdateError,
    InputValidationError,
    OperationAborted,
)
from devtool.logging import get_logger
from devtool.prompts import Prompter
from devtool.runtime import StackRuntime
from devtool.settings import DevtoolSettings

logger = get_logger(__name__)

VHOST_TEMPLATE = """<VirtualHost *:80>
    ServerName {host}

    DocumentRoot {web_root}/{name}/public

    <Directory {web_root}/{name}/public>
        AllowOverride All
        Require all granted
        DirectoryIndex index.php index.html
    </Directory>

    <FilesMatch \\.php$>
        SetHandler "proxy:fcgi://php:9000"
    </FilesMatch>
</VirtualHost>
"""

VITE_SERVER_EXPRESSION = "s|});$|\\tserver: {\\n\\t\\thost: '0.0.0.0'\\n\\t}\\n});|"


@dataclass(slots=True)
class ProjectInput:
    project_name: str
    project_host: str
    project_path: Path
    laravel_version: str


def format_to_kebab_case(text: str) -> str:
    """Lower-case ``text`` and join its ``[a-z0-9-]`` runs with single dashes."""
    cleaned = re.sub(r"[^a-z0-9-]", " ", text.lower())
    joined = "-".join(cleaned.split())
    return re.sub(r"-{2,}", "-", joined).strip("-")


def parse_laravel_version(text: str) -> str:
    value = text.strip()
    if not value:
        return str(DEFAULT_LARAVEL_VERSION)
    if not (value.isascii() and value.isdigit()):
        raise InputValidationError(
            f"'{value}' is not a version number. Type the major version only (e.g. {DEFAULT_LARAVEL_VERSION}).",
            error_code="invalid_laravel_version",
            details={"value": value},
        )
    version = int(value)
    if version < MINIMAL_LARAVEL_VERSION:
        raise InputValidationError(
            f"Laravel {version} is not supported. The minimum accepted version is {MINIMAL_LARAVEL_VERSION}.",
            error_code="laravel_version_too_old",
            details={"value": version, "minimum": MINIMAL_LARAVEL_VERSION},
        )
    return str(version)


def build_project_input(name: str, version: str, project_root: Path) -> ProjectInput:
    return ProjectInput(
        project_name=name,
        project_host=f"{name}.{PROJECT_TLD}",
        project_path=project_root / PROJECTS_DIR / name,
        laravel_version=version,
    )


def _validated_name(raw: str) -> str:
    name = format_to_kebab_case(raw)
    if not name:
        raise InputValidationError(
            f"The project name '{raw}' is empty once formatted.",
            error_code="invalid_project_name",
            details={"value": raw},
        )
    return name


def collect_project_input(
    prompter: Prompter,
    project_root: Path,
    *,
    name: str | None = None,
    version: str | None = None,
) -> ProjectInput:
    """Resolve the project name and Laravel version, prompting for what is missing.

    Values given up front are validated once and raise on error; prompted
    values are asked again until they are usable.
    """
    if name is not None:
        project_name = _validated_name(name)
        if (project_root / PROJECTS_DIR / project_name).exists():
            raise InputValidationError(
                f"The directory {PROJECTS_DIR}/{project_name} already exists.",
                error_code="project_exists",
                details={"project": project_name},
            )
    else:
        project_name = _prompt_name(prompter, project_root)

    if version is not None:
        laravel_version = parse_laravel_version(version)
    else:
        laravel_version = _prompt_version(prompter)

    project = build_project_input(project_name, laravel_version, project_root)
    print(
        f"Project='{project.project_name}', Host='{project.project_host}', Version='{project.laravel_version}'"
    )
    return project


def _prompt_name(prompter: Prompter, project_root: Path) -> str:
    while True:
        raw = prompter.ask("Name of the new project (e.g. example-app): ").lower()
        if not raw:
            prompter.error("The project name cannot be empty.")
            continue
        name = format_to_kebab_case(raw)
        if not name:
            prompter.error("The name is empty once formatted. Try again.")
            continue
        if name != raw:
            print(f"Formatted: '{raw}' changed to '{name}' (kebab-case).")
        if (project_root / PROJECTS_DIR / name).exists():
            prompter.error(f"The directory {PROJECTS_DIR}/{name} already exists.")
            if prompter.confirm("Try another project name?"):
                continue
            raise OperationAborted("Project creation cancelled.", error_code="user_cancelled")
        return name


def _prompt_version(prompter: Prompter) -> str:
    while True:
        raw = prompter.ask(
            f"Laravel version (ENTER={DEFAULT_LARAVEL_VERSION}, minimum {MINIMAL_LARAVEL_VERSION}): "
        )
        try:
            return parse_laravel_version(raw)
        except InputValidationError as exc:
            prompter.error(exc.message)


def render_vhost(project: ProjectInput) -> str:
    return VHOST_TEMPLATE.format(
        host=project.project_host,
        name=project.project_name,
        web_root=CONTAINER_WEB_ROOT,
    )


def _sed_value(value: str) -> str:
    return re.sub(r"([\\/&])", r"\\\1", value)


def env_update_expressions(project: ProjectInput, settings: DevtoolSettings) -> list[str]:
    """``sed`` substitutions pointing a fresh Laravel ``.env`` at the stack's MariaDB."""
    host = _sed_value(project.project_host)
    return [
        f"s/APP_URL=http:\\/\\/localhost/APP_URL=http:\\/\\/{host}/",
        "s/DB_CONNECTION=sqlite/DB_CONNECTION=mariadb/",
        f"s/# DB_PORT=3306/DB_PORT={settings.db_port}/",
        f"s/# DB_DATABASE=laravel/DB_DATABASE={_sed_value(project.project_name)}/",
        "s/# DB_HOST=127.0.0.1/DB_HOST=mariadb/",
        "s/# DB_USERNAME=root/DB_USERNAME=root/",
        f"s/# DB_PASSWORD=/DB_PASSWORD={_sed_value(settings.db_root_password)}/",
    ]


def hosts_file_lists(content: str, host: str) -> bool:
    """Whether a hosts file maps ``host`` as a whole name on an uncommented line."""
    for line in content.splitlines():
        entry = line.split("#", 1)[0].split()
        if host in entry[1:]:
            return True
    return False


def _run_status(command: list[str]) -> int:
    return subprocess.run(command, check=False).returncode


class LaravelProjectBuilder:
    """Drive the stack's containers through the creation of one Laravel project."""

    def __init__(
        self,
        runtime: StackRuntime,
        settings: DevtoolSettings,
        project_root: Path,
        *,
        hosts_file: Path = HOSTS_FILE,
        sleep: Callable[[float], None] = time.sleep,
        command_runner: Callable[[list[str]], int] = _run_status,
    ) -> None:
        self._runtime = runtime
        self._settings = settings
        self._project_root = project_root
        self._hosts_file = hosts_file
        self._sleep = sleep
        self._run_command = command_runner

    def build(self, project: ProjectInput) -> None:
        print(f">> Installing Laravel ({project.laravel_version})")
        self.ensure_php_container()
        self.create_project(project)
        self.configure_project(project)
        self.write_vhost(project)
        self.update_hosts(project)
        self.restart_apache()
        print(f"New Laravel project '{project.project_name}' created.")
        print(f"URL: http://{project.project_host}:{self._settings.server_port}")

    def ensure_php_container(self) -> None:
        name = self._settings.php_container_name
        if self._runtime.is_running(name):
            logger.info("project.container_running", container=name)
            return

        print(f"PHP container '{name}' is not running. Starting the Docker Compose stack...")
        self._runtime.compose_up()
        for attempt in range(1, CONTAINER_START_ATTEMPTS + 1):
            print(f"Waiting for the PHP container (attempt {attempt} of {CONTAINER_START_ATTEMPTS})...")
            self._sleep(CONTAINER_START_WAIT_SECONDS)
            if self._runtime.is_running(name):
                print("PHP container is up.")
                return
        raise ContainerStartError(
            f"PHP container '{name}' did not start after {CONTAINER_START_ATTEMPTS} attempts.",
            error_code="container_not_running",
            details={"container": name, "attempts": CONTAINER_START_ATTEMPTS},
        )

    def create_project(self, project: ProjectInput) -> None:
        self._exec(
            self._settings.php_container_name,
            "composer",
            ["create-project", "laravel/laravel", project.project_name, project.laravel_version],
            step="create-project",
        )
        print(f"Laravel project '{project.project_name}' created in {project.project_path}")

    def configure_project(self, project: ProjectInput) -> None:
        php = self._settings.php_container_name
        node = self._settings.node_container_name

        print(">> Configuring .env...")
        for expression in env_update_expressions(project, self._settings):
            self._in_project(php, project, f"sed -i {shlex.quote(expression)} .env", step="env")

        print(">> Running artisan (config:clear, migrate)...")
        self._in_project(php, project, "php artisan config:clear", step="artisan-config-clear")
        self._in_project(php, project, "php artisan migrate --force", step="artisan-migrate")

        print(">> Running composer update...")
        self._in_project(php, project, "composer update", step="composer-update")

        print(">> Running npm install...")
        self._in_project(node, project, "npm install", step="npm-install")

        print(">> Configuring vite.config.js...")
        self._in_project(
            php,
            project,
            f"sed -i {shlex.quote(VITE_SERVER_EXPRESSION)} vite.config.js",
            step="vite-config",
        )
        print(f"Project '{project.project_name}' initialized.")

    def write_vhost(self, project: ProjectInput) -> Path:
        vhosts_dir = self._project_root / VHOSTS_DIR
        vhosts_dir.mkdir(parents=True, exist_ok=True)
        vhost_path = vhosts_dir / f"{project.project_host}.conf"
        vhost_path.write_text(render_vhost(project), encoding="utf-8")
        print(f"Virtual host written: {vhost_path}")
        return vhost_path

    def update_hosts(self, project: ProjectInput) -> None:
        host = project.project_host
        try:
            content = self._hosts_file.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("project.hosts_unreadable", path=str(self._hosts_file), error=str(exc))
        else:
            if hosts_file_lists(content, host):
                print(f"Host entry '{host}' already present in {self._hosts_file}.")
                return

        print(f"Adding '{host}' to {self._hosts_file} (requires sudo)...")
        command = ["sudo", "sh", "-c", f"echo {shlex.quote(f'127.0.0.1 {host}')} >> {self._hosts_file}"]
        try:
            code = self._run_command(command)
        except FileNotFoundError as exc:
            raise HostsUpdateError(
                "'sudo' is not available to update the hosts file.",
                error_code="sudo_missing",
                details={"host": host},
            ) from exc
        if code != 0:
            raise HostsUpdateError(
                f"Failed to add '{host}' to {self._hosts_file}. Check the sudo password.",
                error_code="hosts_update_failed",
                details={"host": host, "exit_code": code},
            )

    def restart_apache(self) -> None:
        print("Restarting Apache to load the new virtual host...")
        self._runtime.restart_service(APACHE_SERVICE)

    def _in_project(self, container: str, project: ProjectInput, script: str, *, step: str) -> None:
        workdir = f"{CONTAINER_WEB_ROOT}/{project.project_name}"
        self._exec(container, "sh", ["-c", f"cd {workdir} && {script}"], step=step)

    def _exec(self, container: str, tool: str, args: list[str], *, step: str) -> None:
        code = self._runtime.exec_in_container(container, tool, args)
        if code != 0:
            raise ContainerCommandError(
                f"Step '{step}' failed in container '{container}' (exit code {code}).",
                error_code="container_command_failed",
                details={"container": container, "step": step, "exit_code": code},
            )
