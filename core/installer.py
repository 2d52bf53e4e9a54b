"""Package manager commands."""

import logging
import shutil
import subprocess
from pathlib import Path

from .config import DEFAULT_REGISTRY
from .errors import CommandError
from .models import PackageManager

logger = logging.getLogger(__name__)

MODERN_PACKAGES_GLOB = "@modern-js/*"


def monorepo_upgrade_command(package_manager: PackageManager) -> list[str]:
    """Bulk-upgrade command for every Modern.js package in a monorepo.

    pnpm workspaces use pnpm; everything else goes through yarn.
    """
    if package_manager == PackageManager.PNPM:
        return ["pnpm", "update", MODERN_PACKAGES_GLOB, "--recursive", "--latest"]
    return ["yarn", "upgrade", "--scope", MODERN_PACKAGES_GLOB, "--latest"]


def install_command(package_manager: PackageManager, registry: str | None = None) -> list[str]:
    argv = [package_manager.value, "install"]
    if registry and registry.rstrip("/") != DEFAULT_REGISTRY:
        argv.append(f"--registry={registry}")
    return argv


def run_command(argv: list[str], cwd: str | Path | None = None) -> None:
    """Run a command with the terminal attached.

    Raises:
        CommandError: If the executable is missing or exits non-zero
    """
    executable = shutil.which(argv[0])
    if executable is None:
        raise CommandError(f"Command not found: {argv[0]}", argv)

    logger.info("Running %s", " ".join(argv))
    try:
        # stdin, stdout and stderr are inherited
        result = subprocess.run([executable, *argv[1:]], cwd=cwd, check=False)
    except OSError as e:
        raise CommandError(f"Failed to execute {argv[0]}: {e}", argv) from e

    if result.returncode != 0:
        raise CommandError(
            f"Command '{' '.join(argv)}' exited with code {result.returncode}",
            argv,
            result.returncode,
        )
