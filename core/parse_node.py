"""Node.js package.json parsing."""

import json
from pathlib import Path

from .errors import ManifestError
from .models import PackageManifest

MODERN_SCOPE_PREFIX = "@modern-js"


def _dependency_section(data: dict, key: str) -> dict[str, str]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ManifestError(f'"{key}" in package.json must be an object')
    return section


def parse_package_json(content: str, path: str | None = None) -> PackageManifest:
    """Parse package.json content into PackageManifest.

    Args:
        content: The package.json file content
        path: Where the content was read from, if anywhere

    Returns:
        Parsed PackageManifest object

    Raises:
        ManifestError: If the content is not a JSON object
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid package.json: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError("Invalid package.json: top level must be an object")

    return PackageManifest(
        name=data.get("name"),
        version=data.get("version"),
        dependencies=_dependency_section(data, "dependencies"),
        dev_dependencies=_dependency_section(data, "devDependencies"),
        raw=content,
        path=path,
    )


def read_package_json(project_dir: str | Path) -> PackageManifest:
    """Read and parse <project_dir>/package.json."""
    manifest_path = Path(project_dir) / "package.json"
    if not manifest_path.is_file():
        raise ManifestError(f"File {manifest_path} not found")
    return parse_package_json(
        manifest_path.read_text(encoding="utf-8"), path=str(manifest_path)
    )


def modern_packages(dependencies: dict[str, str]) -> list[str]:
    """Names of Modern.js packages, in manifest order.

    The prefix also matches the legacy ``@modern-js-app`` scope.
    """
    return [name for name in dependencies if name.startswith(MODERN_SCOPE_PREFIX)]
