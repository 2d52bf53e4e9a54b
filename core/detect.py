"""Ecosystem, solution and package manager detection."""

import logging
import re
import shutil
from pathlib import Path

from .errors import MultipleSolutionsError, NoSolutionError
from .messages import t
from .models import SOLUTION_TOOLS_MAP, PackageManager, PackageManifest, Solution

logger = logging.getLogger(__name__)

# Checked in this order in every directory on the way up
LOCK_FILES: list[tuple[str, PackageManager]] = [
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("package-lock.json", PackageManager.NPM),
]


def identify(content: str, filename: str | None = None) -> str:
    """Detect ecosystem from content and filename hints.

    Args:
        content: The manifest file content
        filename: Optional filename for additional context

    Returns:
        Detected ecosystem: 'node', 'python', or 'unknown'
    """
    # Filename-based detection (takes precedence)
    if filename:
        if filename.endswith("package.json"):
            return "node"
        if filename.endswith(("requirements.txt", "pyproject.toml")):
            return "python"

    # Node.js patterns
    node_patterns = [
        r'"dependencies"\s*:',
        r'"devDependencies"\s*:',
    ]

    for pattern in node_patterns:
        if re.search(pattern, content):
            return "node"

    # Python requirement lines, e.g. package>=1.0.0
    if re.search(r"^[a-zA-Z0-9\-_]+(\[.*?\])?\s*[><=!~]+", content, re.MULTILINE):
        return "python"

    return "unknown"


def detect_solutions(manifest: PackageManifest) -> list[Solution]:
    """All solutions whose marker dependency appears in the manifest."""
    deps = manifest.all_dependencies()
    return [solution for solution, marker in SOLUTION_TOOLS_MAP.items() if deps.get(marker)]


def detect_solution(manifest: PackageManifest, locale: str | None = None) -> Solution:
    """Detect the single solution a project uses.

    Args:
        manifest: Parsed package.json
        locale: Locale for error messages

    Returns:
        The detected solution

    Raises:
        NoSolutionError: If no marker dependency is present
        MultipleSolutionsError: If markers of two or more solutions are present
    """
    solutions = detect_solutions(manifest)
    if not solutions:
        raise NoSolutionError(t("no_solution", locale))
    if len(solutions) >= 2:
        names = ", ".join(solution.value for solution in solutions)
        raise MultipleSolutionsError(t("more_solution", locale, solutions=names), solutions)
    return solutions[0]


def detect_package_manager(
    project_dir: str | Path, stop_at: str | Path | None = None
) -> PackageManager:
    """Detect the package manager from lock files, then from PATH.

    Walks from project_dir up to stop_at (the home directory by default) or
    the filesystem root, whichever comes first.
    """
    directory = Path(project_dir).resolve()
    stop = Path(stop_at).resolve() if stop_at is not None else Path.home().resolve()

    while directory != stop:
        for lock_file, package_manager in LOCK_FILES:
            if (directory / lock_file).exists():
                logger.debug("Found %s in %s", lock_file, directory)
                return package_manager
        if directory.parent == directory:
            break
        directory = directory.parent

    if shutil.which("pnpm"):
        return PackageManager.PNPM
    if shutil.which("yarn"):
        return PackageManager.YARN
    return PackageManager.NPM
