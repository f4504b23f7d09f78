"""GitHub release discovery.

Looks up the newest release of a repository that satisfies the asset and
pre-release requirements and returns its version and downloadable assets.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from urllib.error import HTTPError, URLError

from kclserver.bootstrap.download import secure_urlopen
from kclserver.core.logging import get_logger
from kclserver.errors import ReleaseLookupError

LOGGER = get_logger(__name__)

GITHUB_API_BASE = "https://api.github.com"
KCL_REPOSITORY = "kcl-lang/kcl"

# The releases endpoint is paginated; the newest page is enough to find the
# latest stable release.
RELEASES_PER_PAGE = 30


@dataclass(frozen=True)
class Asset:
    """A downloadable file attached to a release."""

    name: str
    download_url: str


@dataclass(frozen=True)
class Release:
    """A published release and its assets.

    Attributes:
        version: The release tag, verbatim (e.g. "v0.11.0").
        assets: Assets in the order the service lists them.
    """

    version: str
    assets: Tuple[Asset, ...] = ()

    def find_asset(self, name: str) -> Optional[Asset]:
        """Return the asset with exactly this name, if any."""
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Release":
        """Create from a GitHub API release object."""
        return cls(
            version=data["tag_name"],
            assets=tuple(
                Asset(name=a["name"], download_url=a["browser_download_url"])
                for a in data.get("assets") or []
            ),
        )


def _qualifies(data: Dict[str, Any], require_assets: bool, pre_release: bool) -> bool:
    if data.get("draft"):
        return False
    if data.get("prerelease") and not pre_release:
        return False
    if require_assets and not data.get("assets"):
        return False
    return True


def _fetch_releases(
    repo: str,
    api_url: str,
    token: Optional[str],
    timeout: Optional[float],
) -> List[Dict[str, Any]]:
    url = f"{api_url.rstrip('/')}/repos/{repo}/releases?per_page={RELEASES_PER_PAGE}"
    headers = {"Accept": "application/vnd.github+json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    LOGGER.debug(f"Fetching releases from {url}")
    try:
        with secure_urlopen(url, headers=headers, timeout=timeout) as response:
            data = json.loads(response.read().decode("utf-8"))
    except HTTPError as e:
        raise ReleaseLookupError(
            f"Failed to fetch releases for {repo}: HTTP {e.code} - {e.reason}"
        ) from e
    except URLError as e:
        raise ReleaseLookupError(
            f"Failed to fetch releases for {repo}: {e.reason}"
        ) from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ReleaseLookupError(f"Invalid release data for {repo}: {e}") from e
    except (OSError, ValueError) as e:
        raise ReleaseLookupError(f"Failed to fetch releases for {repo}: {e}") from e

    if not isinstance(data, list):
        raise ReleaseLookupError(
            f"Invalid release data for {repo}: expected a list, got {type(data).__name__}"
        )
    return data


def latest_github_release(
    repo: str = KCL_REPOSITORY,
    require_assets: bool = True,
    pre_release: bool = False,
    api_url: str = GITHUB_API_BASE,
    token: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Release:
    """Get the latest qualifying release of a GitHub repository.

    Drafts are always skipped. Releases are listed newest first and the first
    one that qualifies wins.

    Args:
        repo: Repository in "owner/name" form.
        require_assets: Skip releases without attached assets.
        pre_release: Accept releases marked as pre-releases.
        api_url: GitHub API base URL.
        token: Optional API token, sent as a bearer token.
        timeout: Socket timeout in seconds, or None for the transport default.

    Returns:
        The latest qualifying release.

    Raises:
        ReleaseLookupError: If the API call fails or nothing qualifies.
    """
    for data in _fetch_releases(repo, api_url, token, timeout):
        if not _qualifies(data, require_assets, pre_release):
            continue
        try:
            release = Release.from_dict(data)
        except (KeyError, TypeError) as e:
            raise ReleaseLookupError(f"Invalid release data for {repo}: {e}") from e
        LOGGER.debug(f"Latest release of {repo} is {release.version}")
        return release

    raise ReleaseLookupError(f"No qualifying release found for {repo}")
