"""Upgrade a Modern.js project to the latest release of its solution."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path

from pydantic import BaseModel

from .config import get_settings
from .detect import detect_package_manager, detect_solution
from .installer import install_command, monorepo_upgrade_command, run_command
from .manifest_patch import update_json_file, update_json_text
from .messages import t
from .models import (
    PackageManager,
    PackageManifest,
    Solution,
    UpgradeReport,
    VersionUpdate,
    solution_text,
)
from .parse_node import modern_packages, read_package_json
from .registry import NpmRegistryClient

logger = logging.getLogger(__name__)

CommandRunner = Callable[[list[str], Path], None]
ProgressFactory = Callable[[], AbstractContextManager]


class UpgradeOptions(BaseModel):
    """What to upgrade and how."""

    project_dir: Path = Path(".")
    registry: str | None = None
    locale: str = "en"
    dist_tag: str = "latest"
    dry_run: bool = False
    skip_install: bool = False
    package_manager: PackageManager | None = None


def resolve_registry(options: UpgradeOptions) -> str:
    """Registry used for both version lookups and the install."""
    return options.registry or get_settings().registry


def make_client(options: UpgradeOptions) -> NpmRegistryClient:
    settings = get_settings()
    return NpmRegistryClient(
        registry=resolve_registry(options),
        timeout=settings.timeout,
        max_concurrency=settings.max_concurrency,
    )


async def handle_template_file(
    options: UpgradeOptions,
    client: NpmRegistryClient,
    runner: CommandRunner = run_command,
    progress: ProgressFactory | None = None,
) -> UpgradeReport:
    """Detect the solution and bring its Modern.js packages up to date.

    Monorepos are handed to the package manager's bulk upgrade. Other
    projects get every Modern.js dependency set to the newest published
    version not above the solution's version.

    Args:
        options: Upgrade options
        client: Registry client for version lookups
        runner: Runs a command in the project directory, in a worker thread
        progress: Context manager factory shown while versions are resolved

    Returns:
        Report of what was (or, in a dry run, would be) changed
    """
    project_dir = options.project_dir
    manifest = read_package_json(project_dir)

    solution = detect_solution(manifest, options.locale)
    logger.info(
        "[%s]: %s",
        t("project_type", options.locale),
        solution_text(solution, options.locale),
    )

    modern_version = await client.get_modern_version(solution, options.dist_tag)
    logger.info("[%s]: %s", t("modern_version", options.locale), modern_version)

    package_manager = options.package_manager or detect_package_manager(project_dir)

    if solution == Solution.MONOREPO:
        command = monorepo_upgrade_command(package_manager)
        if not options.dry_run:
            await asyncio.to_thread(runner, command, project_dir)
        return UpgradeReport(
            solution=solution,
            modern_version=modern_version,
            package_manager=package_manager,
            command=command,
        )

    # The progress display must be gone before any command takes the terminal
    with progress() if progress else nullcontext():
        updates = await resolve_manifest_updates(manifest, client, modern_version)

    report = UpgradeReport(
        solution=solution,
        modern_version=modern_version,
        package_manager=package_manager,
        updates=updates,
    )
    report.updated_content = patch_manifest(manifest, report, write=not options.dry_run)
    return report


async def resolve_manifest_updates(
    manifest: PackageManifest, client: NpmRegistryClient, modern_version: str
) -> list[VersionUpdate]:
    """Resolve target versions for Modern.js dependencies, then dev dependencies."""
    updates = await client.resolve_updates(
        "dependencies",
        modern_packages(manifest.dependencies),
        modern_version,
        manifest.dependencies,
    )
    updates += await client.resolve_updates(
        "devDependencies",
        modern_packages(manifest.dev_dependencies),
        modern_version,
        manifest.dev_dependencies,
    )
    return updates


def patch_manifest(manifest: PackageManifest, report: UpgradeReport, write: bool = False) -> str:
    """Manifest text with the report's versions set, written back when asked."""
    if not report.update_info:
        report.notes.append("No Modern.js packages found in dependencies")
        return manifest.raw

    operation = {"query": {}, "update": {"$set": report.update_info}}
    if write and manifest.path:
        logger.debug("Updating %s", manifest.path)
        return update_json_file(manifest.path, operation)
    return update_json_text(manifest.raw, operation)


async def run_upgrade(
    options: UpgradeOptions,
    client: NpmRegistryClient | None = None,
    runner: CommandRunner = run_command,
    progress: ProgressFactory | None = None,
) -> UpgradeReport:
    """Run the whole upgrade: update the manifest, then install."""
    logger.debug("start upgrade in %s", options.project_dir)
    logger.debug("options=%s", options.model_dump_json())

    client = client or make_client(options)
    report = await handle_template_file(options, client, runner, progress)

    if options.dry_run:
        return report

    if report.solution != Solution.MONOREPO and not options.skip_install:
        command = install_command(report.package_manager, resolve_registry(options))
        await asyncio.to_thread(runner, command, options.project_dir)

    report.notes.append(t("success", options.locale))
    logger.debug("upgrade in %s succeeded", options.project_dir)
    return report
