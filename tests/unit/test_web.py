"""Tests for web application functionality."""

import json
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from apps.web.main import app
from core.errors import RegistryError
from core.models import VersionUpdate


class TestWebApp:
    """Test web application endpoints."""

    def setup_method(self):
        """Setup test fixtures."""
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_plan_api_success(self, sample_package_json):
        """Should plan a manifest update."""
        with patch("apps.web.main.NpmRegistryClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value = mock_client
            mock_client.get_modern_version.return_value = "2.5.2"
            mock_client.resolve_updates.side_effect = [
                [VersionUpdate("dependencies", "@modern-js/runtime", "^2.4.0", "2.5.2")],
                [
                    VersionUpdate("devDependencies", "@modern-js/app-tools", "^2.4.0", "2.5.2"),
                    VersionUpdate("devDependencies", "@modern-js/eslint-config", "2.4.0", "2.5.0"),
                ],
            ]

            response = self.client.post("/api/plan", json={"content": sample_package_json})

            assert response.status_code == 200
            data = response.json()

            assert data["solution"] == "mwa"
            assert data["modern_version"] == "2.5.2"
            assert data["has_changes"] is True
            assert data["command"] is None
            assert len(data["changes"]) == 3
            assert data["update_info"]["devDependencies.@modern-js/eslint-config"] == "2.5.0"

            updated = json.loads(data["updated_content"])
            assert updated["dependencies"]["@modern-js/runtime"] == "2.5.2"
            assert updated["dependencies"]["react"] == "^18.2.0"

    def test_plan_api_passes_registry(self, sample_package_json):
        with patch("apps.web.main.NpmRegistryClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value = mock_client
            mock_client.get_modern_version.return_value = "3.0.0"
            mock_client.resolve_updates.return_value = []

            self.client.post("/api/plan", json={
                "content": sample_package_json,
                "registry": "https://mirror.example.com",
                "dist_tag": "next",
            })

            assert mock_client_class.call_args[1]["registry"] == "https://mirror.example.com"
            mock_client.get_modern_version.assert_awaited_once()
            assert mock_client.get_modern_version.call_args[0][1] == "next"

    def test_plan_api_monorepo(self):
        content = json.dumps({"devDependencies": {"@modern-js/monorepo-tools": "^2.4.0"}})

        with patch("apps.web.main.NpmRegistryClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value = mock_client
            mock_client.get_modern_version.return_value = "2.5.2"

            response = self.client.post("/api/plan", json={
                "content": content,
                "package_manager": "pnpm",
            })

            assert response.status_code == 200
            data = response.json()
            assert data["solution"] == "monorepo"
            assert data["command"] == ["pnpm", "update", "@modern-js/*", "--recursive", "--latest"]
            assert data["updated_content"] is None
            mock_client.resolve_updates.assert_not_called()

    def test_plan_api_empty_content(self):
        """Should handle empty content gracefully."""
        response = self.client.post("/api/plan", json={"content": "  "})

        assert response.status_code == 400
        assert "No content provided" in response.json()["detail"]

    def test_plan_api_unsupported_ecosystem(self):
        """Should reject content that isn't a package.json."""
        response = self.client.post("/api/plan", json={"content": "fastapi>=0.85.0"})

        assert response.status_code == 400
        assert "Unsupported ecosystem: python" in response.json()["detail"]

    def test_plan_api_invalid_json(self):
        response = self.client.post("/api/plan", json={"content": '{"dependencies": '})

        assert response.status_code == 400
        assert "Invalid package.json" in response.json()["detail"]

    def test_plan_api_no_solution(self):
        response = self.client.post("/api/plan", json={
            "content": '{"dependencies": {"react": "^18.2.0"}}'
        })

        assert response.status_code == 400
        assert "No Modern.js solution" in response.json()["detail"]

    def test_plan_api_multiple_solutions(self):
        content = json.dumps({
            "dependencies": {"@modern-js/app-tools": "^2.0.0"},
            "devDependencies": {"@modern-js/module-tools": "^2.0.0"},
        })

        response = self.client.post("/api/plan", json={"content": content})

        assert response.status_code == 400
        assert "More than one" in response.json()["detail"]

    def test_plan_api_registry_error(self, sample_package_json):
        with patch("apps.web.main.NpmRegistryClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value = mock_client
            mock_client.get_modern_version.side_effect = RegistryError("Timeout fetching metadata")

            response = self.client.post("/api/plan", json={"content": sample_package_json})

            assert response.status_code == 502
            assert "Timeout" in response.json()["detail"]

    def test_plan_api_unexpected_error(self, sample_package_json):
        with patch("apps.web.main.NpmRegistryClient") as mock_client_class:
            mock_client_class.side_effect = RuntimeError("boom")

            response = self.client.post("/api/plan", json={"content": sample_package_json})

            assert response.status_code == 500
            assert "boom" in response.json()["detail"]

    def test_upload_file(self, sample_package_json):
        """Should plan an uploaded package.json."""
        with patch("apps.web.main.NpmRegistryClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value = mock_client
            mock_client.get_modern_version.return_value = "2.5.2"
            mock_client.resolve_updates.return_value = []

            response = self.client.post(
                "/api/upload",
                files={"file": ("package.json", sample_package_json.encode(), "application/json")},
            )

            assert response.status_code == 200
            assert response.json()["solution"] == "mwa"

    def test_upload_non_utf8(self):
        response = self.client.post(
            "/api/upload",
            files={"file": ("package.json", b"\xff\xfe\x00bad", "application/json")},
        )

        assert response.status_code == 400
        assert "UTF-8" in response.json()["detail"]
