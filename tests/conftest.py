"""Pytest configuration and fixtures."""

import json
from urllib.parse import unquote

import httpx
import pytest


@pytest.fixture
def sample_package_json():
    """Sample package.json content for a Modern.js web app."""
    return """{
  "name": "test-project",
  "version": "0.1.0",
  "dependencies": {
    "@modern-js/runtime": "^2.4.0",
    "react": "^18.2.0"
  },
  "devDependencies": {
    "@modern-js/app-tools": "^2.4.0",
    "@modern-js/eslint-config": "2.4.0",
    "typescript": "~5.0.4"
  }
}
"""


@pytest.fixture
def sample_packuments():
    """Registry documents keyed by package name."""
    return {
        "@modern-js/app-tools": {
            "name": "@modern-js/app-tools",
            "dist-tags": {"latest": "2.5.2", "next": "3.0.0-beta.1"},
            "versions": {"2.4.0": {}, "2.5.0": {}, "2.5.1": {}, "2.5.2": {}, "3.0.0-beta.1": {}},
        },
        "@modern-js/module-tools": {
            "name": "@modern-js/module-tools",
            "dist-tags": {"latest": "2.5.2"},
            "versions": {"2.5.2": {}},
        },
        "@modern-js/monorepo-tools": {
            "name": "@modern-js/monorepo-tools",
            "dist-tags": {"latest": "2.5.2"},
            "versions": {"2.5.2": {}},
        },
        "@modern-js/runtime": {
            "name": "@modern-js/runtime",
            "dist-tags": {"latest": "2.5.2"},
            "versions": {"2.4.0": {}, "2.5.2": {}},
        },
        "@modern-js/eslint-config": {
            "name": "@modern-js/eslint-config",
            "dist-tags": {"latest": "2.5.0"},
            "versions": {"2.4.0": {}, "2.5.0": {}},
        },
    }


@pytest.fixture
def registry_transport(sample_packuments):
    """Build an httpx transport serving packuments; records requested names."""

    def factory(packuments=None, requested=None):
        documents = sample_packuments if packuments is None else packuments

        def handler(request: httpx.Request) -> httpx.Response:
            name = unquote(request.url.raw_path.decode()).lstrip("/")
            if requested is not None:
                requested.append(name)
            if name not in documents:
                return httpx.Response(404, json={"error": "Not found"})
            return httpx.Response(200, json=documents[name])

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def project_dir(tmp_path, sample_package_json):
    """A Modern.js app project with a pnpm lock file."""
    (tmp_path / "package.json").write_text(sample_package_json)
    (tmp_path / "pnpm-lock.yaml").write_text("lockfileVersion: '6.0'\n")
    return tmp_path


@pytest.fixture
def monorepo_dir(tmp_path):
    """A Modern.js monorepo with a yarn lock file."""
    manifest = {
        "name": "workspace",
        "private": True,
        "devDependencies": {"@modern-js/monorepo-tools": "^2.4.0"},
    }
    (tmp_path / "package.json").write_text(json.dumps(manifest, indent=2) + "\n")
    (tmp_path / "yarn.lock").write_text("")
    return tmp_path
