"""Core data models for modern-upgrade."""

from dataclasses import dataclass, field
from enum import Enum


class Solution(str, Enum):
    """Supported Modern.js project solutions."""

    MWA = "mwa"
    MODULE = "module"
    MONOREPO = "monorepo"


class PackageManager(str, Enum):
    """Package managers the upgrade can drive."""

    PNPM = "pnpm"
    YARN = "yarn"
    NPM = "npm"


# Marker dependency that identifies each solution in a package.json
SOLUTION_TOOLS_MAP: dict[Solution, str] = {
    Solution.MWA: "@modern-js/app-tools",
    Solution.MODULE: "@modern-js/module-tools",
    Solution.MONOREPO: "@modern-js/monorepo-tools",
}

SOLUTION_TEXT: dict[Solution, dict[str, str]] = {
    Solution.MWA: {"en": "Web App", "zh": "应用"},
    Solution.MODULE: {"en": "Npm Module", "zh": "Npm 模块"},
    Solution.MONOREPO: {"en": "Monorepo", "zh": "Monorepo"},
}


def solution_text(solution: Solution, locale: str = "en") -> str:
    """Display name of a solution, falling back to English."""
    texts = SOLUTION_TEXT[solution]
    return texts.get(locale, texts["en"])


@dataclass
class PackageManifest:
    """A parsed package.json."""

    name: str | None = None
    version: str | None = None
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    raw: str = ""
    path: str | None = None

    def all_dependencies(self) -> dict[str, str]:
        """Dev dependencies overlaid with runtime dependencies."""
        return {**self.dev_dependencies, **self.dependencies}


@dataclass
class VersionUpdate:
    """A single dependency version to set in the manifest."""

    section: str  # dependencies, devDependencies
    name: str
    current: str | None
    target: str

    @property
    def path(self) -> str:
        return f"{self.section}.{self.name}"

    @property
    def has_change(self) -> bool:
        return self.current != self.target


@dataclass
class UpgradeReport:
    """Outcome of an upgrade run."""

    solution: Solution
    modern_version: str
    package_manager: PackageManager
    updates: list[VersionUpdate] = field(default_factory=list)
    command: list[str] | None = None  # bulk-upgrade argv for monorepos
    updated_content: str | None = None
    notes: list[str] = field(default_factory=list)

    @property
    def update_info(self) -> dict[str, str]:
        return {update.path: update.target for update in self.updates}

    @property
    def has_changes(self) -> bool:
        if self.command:
            return True
        return any(update.has_change for update in self.updates)

    def to_dict(self) -> dict:
        return {
            "solution": self.solution.value,
            "modern_version": self.modern_version,
            "package_manager": self.package_manager.value,
            "changes": [
                {
                    "section": update.section,
                    "name": update.name,
                    "current_version": update.current,
                    "new_version": update.target,
                    "has_change": update.has_change,
                }
                for update in self.updates
            ],
            "update_info": self.update_info,
            "command": self.command,
            "has_changes": self.has_changes,
            "notes": self.notes,
        }
