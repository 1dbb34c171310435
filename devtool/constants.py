"""Shared constants for devtool."""

from __future__ import annotations

from pathlib import Path

ENV_FILE = ".env"
EXAMPLE_ENV_FILE = "env.example"

DEFAULT_CONTAINER_NAME = "dev_container"
DEFAULT_SERVER_PORT = 8000
DEFAULT_DB_PORT = 3306
DEFAULT_DB_ROOT_PASSWORD = "password"
DEFAULT_CONTAINER_RUNTIME = "docker"

DEFAULT_LARAVEL_VERSION = 12
MINIMAL_LARAVEL_VERSION = 10

# Layout of the Compose stack, relative to its root directory.
STACK_MARKER_DIR = "docker"
VHOSTS_DIR = Path("docker") / "apache" / "vhosts"
PROJECTS_DIR = "src"

# Mount point of the projects directory inside the PHP and Node containers.
CONTAINER_WEB_ROOT = "/var/www/html"
APACHE_SERVICE = "apache"
HOSTS_FILE = Path("/etc/hosts")
PROJECT_TLD = "test"

CONTAINER_START_ATTEMPTS = 3
CONTAINER_START_WAIT_SECONDS = 3.0

# Shell conventions for exec failures.
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127
EXIT_INTERRUPTED = 130

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
