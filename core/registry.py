"""npm registry version resolution."""

import asyncio
import logging

import httpx
from packaging.version import InvalidVersion, Version

from .config import DEFAULT_REGISTRY
from .errors import RegistryError
from .models import SOLUTION_TOOLS_MAP, Solution, VersionUpdate

logger = logging.getLogger(__name__)

# Abbreviated metadata: versions and dist-tags only
ABBREVIATED_ACCEPT = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8"


def previous_patch(version: str) -> str | None:
    """The version one patch below, or None if there is none to step to.

    Only plain x.y.z releases are stepped; prereleases and anything
    unparsable return None.
    """
    try:
        parsed = Version(version)
    except InvalidVersion:
        return None
    if parsed.is_prerelease or parsed.is_postrelease or len(parsed.release) != 3:
        return None
    major, minor, micro = parsed.release
    if micro == 0:
        return None
    return f"{major}.{minor}.{micro - 1}"


class NpmRegistryClient:
    """Client for npm registry lookups."""

    def __init__(
        self,
        registry: str = DEFAULT_REGISTRY,
        timeout: float = 30.0,
        max_concurrency: int = 6,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize registry client.

        Args:
            registry: Registry base URL
            timeout: Request timeout in seconds
            max_concurrency: Maximum concurrent requests
            transport: Optional httpx transport, mainly for tests
        """
        self.registry = registry.rstrip("/")
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self._transport = transport
        self._cache: dict[str, dict | None] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency)

    def package_url(self, package_name: str) -> str:
        # Scoped names keep the @ but escape the slash
        return f"{self.registry}/{package_name.replace('/', '%2f')}"

    async def get_modern_version(self, solution: Solution, dist_tag: str = "latest") -> str:
        """Get the version a dist-tag points at for a solution's tools package.

        Args:
            solution: Detected solution
            dist_tag: Dist-tag to read, usually "latest"

        Returns:
            Version string
        """
        package_name = SOLUTION_TOOLS_MAP[solution]
        packument = await self._fetch_packument(package_name)
        if not packument:
            raise RegistryError(f"Package {package_name} not found in {self.registry}")

        version = packument.get("dist-tags", {}).get(dist_tag)
        if not version:
            raise RegistryError(f"Package {package_name} has no '{dist_tag}' dist-tag")
        return version

    async def package_exists(self, package_name: str, version: str) -> bool:
        """Check whether package_name@version is published."""
        packument = await self._fetch_packument(package_name)
        if not packument:
            return False
        return version in packument.get("versions", {})

    async def get_available_version(
        self, package_name: str, version: str, attempts: int = 5
    ) -> str:
        """Find the newest published version at or just below a target.

        Packages in the scope are not all published on every release, so the
        patch number is stepped down until a published version is found.

        Args:
            package_name: Name of the package
            version: Target version, usually the solution's version
            attempts: How many versions to check at most

        Returns:
            The first published candidate, or the last one checked if none is
        """
        candidate = version
        for attempt in range(attempts):
            if await self.package_exists(package_name, candidate):
                return candidate
            lower = previous_patch(candidate)
            if lower is None or attempt == attempts - 1:
                break
            candidate = lower

        logger.warning("No published version of %s found near %s", package_name, version)
        return candidate

    async def resolve_updates(
        self,
        section: str,
        package_names: list[str],
        version: str,
        current: dict[str, str] | None = None,
    ) -> list[VersionUpdate]:
        """Resolve available versions for many packages concurrently.

        Args:
            section: Manifest section the packages live in
            package_names: Packages to resolve
            version: Target version
            current: Current manifest specs by package name

        Returns:
            One update per package, in the given order
        """
        current = current or {}
        tasks = [self.get_available_version(name, version) for name in package_names]
        targets = await asyncio.gather(*tasks)
        return [
            VersionUpdate(section=section, name=name, current=current.get(name), target=target)
            for name, target in zip(package_names, targets)
        ]

    async def _fetch_packument(self, package_name: str) -> dict | None:
        """Fetch package metadata from the registry.

        Args:
            package_name: Name of the package

        Returns:
            Packument dict or None if not found
        """
        # Check cache first
        if package_name in self._cache:
            return self._cache[package_name]

        url = self.package_url(package_name)

        async with self._semaphore:
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout,
                    transport=self._transport,
                    headers={"Accept": ABBREVIATED_ACCEPT},
                ) as client:
                    logger.debug("GET %s", url)
                    response = await client.get(url)
                    if response.status_code == 404:
                        self._cache[package_name] = None
                        return None
                    response.raise_for_status()
                    packument = response.json()

            except httpx.TimeoutException as e:
                raise RegistryError(f"Timeout fetching metadata for {package_name}") from e
            except httpx.HTTPStatusError as e:
                raise RegistryError(f"HTTP error fetching {package_name}: {e}") from e
            except httpx.HTTPError as e:
                raise RegistryError(f"Network error fetching {package_name}: {e}") from e
            except ValueError as e:
                raise RegistryError(f"Invalid registry response for {package_name}") from e

        self._cache[package_name] = packument
        return packument
