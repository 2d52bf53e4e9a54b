"""FastAPI web application for modern-upgrade."""

import logging
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from core.config import get_settings
from core.detect import detect_solution, identify
from core.errors import ManifestError, MultipleSolutionsError, NoSolutionError, RegistryError
from core.installer import monorepo_upgrade_command
from core.models import PackageManager, Solution, UpgradeReport
from core.parse_node import parse_package_json
from core.registry import NpmRegistryClient
from core.upgrade import patch_manifest, resolve_manifest_updates

logger = logging.getLogger(__name__)

app = FastAPI(
    title="modern-upgrade",
    description="Plan upgrades of Modern.js projects to the latest release",
    version="0.1.0",
)


class PlanRequest(BaseModel):
    """Request model for planning an upgrade."""
    content: str
    registry: Optional[str] = None
    dist_tag: Optional[str] = None
    package_manager: PackageManager = PackageManager.PNPM


class PlanResponse(BaseModel):
    """Response model for an upgrade plan."""
    solution: str
    modern_version: str
    package_manager: str
    changes: list[dict]
    update_info: dict[str, str]
    updated_content: Optional[str]
    command: Optional[list[str]]
    has_changes: bool


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/plan", response_model=PlanResponse)
async def plan_upgrade(request: PlanRequest):
    """Plan an upgrade for package.json content without touching disk."""
    settings = get_settings()
    try:
        content = request.content.strip()
        if not content:
            raise HTTPException(status_code=400, detail="No content provided")

        ecosystem = identify(content, "package.json" if content.startswith("{") else None)
        if ecosystem != "node":
            raise HTTPException(
                status_code=400,
                detail=f"Unsupported ecosystem: {ecosystem}. Only package.json is supported.",
            )

        manifest = parse_package_json(request.content)
        solution = detect_solution(manifest, settings.locale)

        client = NpmRegistryClient(
            registry=request.registry or settings.registry,
            timeout=settings.timeout,
            max_concurrency=settings.max_concurrency,
        )
        modern_version = await client.get_modern_version(
            solution, request.dist_tag or settings.dist_tag
        )

        report = UpgradeReport(
            solution=solution,
            modern_version=modern_version,
            package_manager=request.package_manager,
        )

        if solution == Solution.MONOREPO:
            report.command = monorepo_upgrade_command(request.package_manager)
        else:
            report.updates = await resolve_manifest_updates(manifest, client, modern_version)
            report.updated_content = patch_manifest(manifest, report)

        data = report.to_dict()
        return PlanResponse(
            solution=data["solution"],
            modern_version=data["modern_version"],
            package_manager=data["package_manager"],
            changes=data["changes"],
            update_info=data["update_info"],
            updated_content=report.updated_content,
            command=data["command"],
            has_changes=data["has_changes"],
        )

    except HTTPException:
        # Re-raise HTTP exceptions (don't convert to 500)
        raise
    except (ManifestError, NoSolutionError, MultipleSolutionsError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RegistryError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.exception("Failed to plan upgrade")
        raise HTTPException(status_code=500, detail=f"Error planning upgrade: {str(e)}")


@app.post("/api/upload", response_model=PlanResponse)
async def upload_file(
    file: UploadFile = File(...),
    registry: Optional[str] = Form(None),
    dist_tag: Optional[str] = Form(None),
    package_manager: PackageManager = Form(PackageManager.PNPM),
):
    """Upload and plan a package.json file."""
    try:
        if not file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")

        # Read file content
        content = await file.read()
        text_content = content.decode("utf-8")

        # Process using the same logic as text input
        request = PlanRequest(
            content=text_content,
            registry=registry,
            dist_tag=dist_tag,
            package_manager=package_manager,
        )

        return await plan_upgrade(request)

    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be valid UTF-8 text")
    except HTTPException:
        # Re-raise HTTP exceptions
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")
