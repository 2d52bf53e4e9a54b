"""CLI application for modern-upgrade."""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from core.config import get_settings
from core.errors import UpgradeError
from core.messages import t
from core.models import PackageManager, UpgradeReport
from core.upgrade import UpgradeOptions, run_upgrade

console = Console(soft_wrap=True)
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Send log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def format_diff_output(report: UpgradeReport, project_dir: str) -> str:
    """Format diff-style output showing changes."""
    if report.command:
        return f"$ (cd {project_dir}) {' '.join(report.command)}"

    manifest_path = str(Path(project_dir) / "package.json")
    lines = [f"--- {manifest_path}"]
    lines.append(f"+++ {manifest_path}")

    for update in report.updates:
        # Only show changes
        if update.has_change:
            lines.append(f"-{update.name}@{update.current}")
            lines.append(f"+{update.name}@{update.target}")

    return "\n".join(lines)


def format_json_output(report: UpgradeReport) -> str:
    """Format JSON output."""
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


app = typer.Typer(
    name="modern-upgrade",
    help="modern-upgrade - Upgrade a Modern.js project to the latest release",
    add_completion=False,
)


@app.command()
def upgrade(
    project_dir: str = typer.Argument(".", help="Project directory containing package.json"),
    registry: str | None = typer.Option(None, "--registry", help="npm registry URL"),
    dist_tag: str | None = typer.Option(None, "--dist-tag", help="Dist-tag to upgrade to"),
    locale: str | None = typer.Option(None, "--locale", help="Message locale: en, zh"),
    package_manager: PackageManager | None = typer.Option(
        None, "--package-manager", help="Skip detection and use this package manager"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show changes without applying"),
    skip_install: bool = typer.Option(False, "--skip-install", help="Don't install after updating"),
    format_type: str = typer.Option("diff", "--format", help="Output format: diff, json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """modern-upgrade - Upgrade Modern.js packages in a project."""

    settings = get_settings()
    configure_logging(verbose or settings.debug)

    try:
        if not (Path(project_dir) / "package.json").is_file():
            console.print(f"Error: File {Path(project_dir) / 'package.json'} not found", style="red")
            raise typer.Exit(1)

        options = UpgradeOptions(
            project_dir=Path(project_dir),
            registry=registry or settings.registry,
            locale=locale or settings.locale,
            dist_tag=dist_tag or settings.dist_tag,
            dry_run=dry_run,
            skip_install=skip_install,
            package_manager=package_manager,
        )

        def progress():
            return err_console.status(t("loading", options.locale), spinner="dots")

        report = asyncio.run(run_upgrade(options, progress=progress))

        # Check for changes
        if not report.has_changes:
            if format_type == "json":
                typer.echo(format_json_output(report))
            else:
                console.print("No updates available")
            raise typer.Exit(2)  # No changes exit code

        # Generate output
        if format_type == "json":
            typer.echo(format_json_output(report))
        elif dry_run:
            console.print(format_diff_output(report, project_dir), highlight=False)
        else:
            changed = [update for update in report.updates if update.has_change]
            if report.command:
                console.print(f"Ran {' '.join(report.command)}", highlight=False)
            else:
                console.print(f"Updated {len(changed)} package(s) to {report.modern_version}")
            for note in report.notes:
                console.print(note, style="green")

    except typer.Exit:
        # Re-raise typer exits (like Exit(2) for no changes)
        raise
    except UpgradeError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)
    except Exception as e:
        logging.getLogger(__name__).debug("Unexpected failure", exc_info=True)
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
