"""Tests for GitHub release discovery."""

from __future__ import annotations

import json
from typing import Any, Dict, List
from unittest.mock import patch
from urllib.error import HTTPError, URLError

import pytest

from kclserver.bootstrap.releases import (
    GITHUB_API_BASE,
    KCL_REPOSITORY,
    Asset,
    Release,
    latest_github_release,
)
from kclserver.errors import ReleaseLookupError


def _release(tag: str, assets: List[str], prerelease: bool = False, draft: bool = False) -> Dict[str, Any]:
    return {
        "tag_name": tag,
        "prerelease": prerelease,
        "draft": draft,
        "assets": [
            {"name": name, "browser_download_url": f"https://github.com/dl/{tag}/{name}"}
            for name in assets
        ],
    }


class TestRelease:
    """Tests for the Release dataclass."""

    def test_from_dict(self) -> None:
        release = Release.from_dict(_release("v0.11.0", ["a.tar.gz", "b.zip"]))

        assert release.version == "v0.11.0"
        assert release.assets == (
            Asset("a.tar.gz", "https://github.com/dl/v0.11.0/a.tar.gz"),
            Asset("b.zip", "https://github.com/dl/v0.11.0/b.zip"),
        )

    def test_find_asset_exact_match(self) -> None:
        release = Release("1.2.0", (Asset("kclvm-1.2.0-darwin-arm64.tar.gz", "u"),))

        assert release.find_asset("kclvm-1.2.0-darwin-arm64.tar.gz") is release.assets[0]

    def test_find_asset_is_case_sensitive(self) -> None:
        release = Release("1.2.0", (Asset("kclvm-1.2.0-Darwin-arm64.tar.gz", "u"),))

        assert release.find_asset("kclvm-1.2.0-darwin-arm64.tar.gz") is None

    def test_find_asset_has_no_prefix_matching(self) -> None:
        release = Release("1.2.0", (Asset("kclvm-1.2.0-darwin-arm64.tar.gz.sha256", "u"),))

        assert release.find_asset("kclvm-1.2.0-darwin-arm64.tar.gz") is None


class TestLatestGithubRelease:
    """Tests for latest_github_release."""

    def _fetch(self, make_response, releases: Any, **kwargs: Any) -> Release:
        payload = json.dumps(releases).encode("utf-8")
        with patch(
            "kclserver.bootstrap.releases.secure_urlopen",
            return_value=make_response(payload),
        ) as mock_open:
            release = latest_github_release(KCL_REPOSITORY, **kwargs)
        self.mock_open = mock_open
        return release

    def test_returns_newest_stable_release(self, make_response) -> None:
        release = self._fetch(make_response, [
            _release("v0.12.0-rc.1", ["x.tar.gz"], prerelease=True),
            _release("v0.11.0", ["kclvm-v0.11.0-linux-amd64.tar.gz"]),
            _release("v0.10.0", ["kclvm-v0.10.0-linux-amd64.tar.gz"]),
        ])

        assert release.version == "v0.11.0"
        assert release.assets[0].name == "kclvm-v0.11.0-linux-amd64.tar.gz"

    def test_skips_drafts(self, make_response) -> None:
        release = self._fetch(make_response, [
            _release("v0.12.0", ["x.tar.gz"], draft=True),
            _release("v0.11.0", ["y.tar.gz"]),
        ])

        assert release.version == "v0.11.0"

    def test_skips_releases_without_assets(self, make_response) -> None:
        release = self._fetch(make_response, [
            _release("v0.12.0", []),
            _release("v0.11.0", ["y.tar.gz"]),
        ])

        assert release.version == "v0.11.0"

    def test_accepts_assetless_release_when_not_required(self, make_response) -> None:
        release = self._fetch(make_response, [_release("v0.12.0", [])], require_assets=False)

        assert release.version == "v0.12.0"
        assert release.assets == ()

    def test_accepts_prerelease_when_allowed(self, make_response) -> None:
        release = self._fetch(
            make_response,
            [_release("v0.12.0-rc.1", ["x.tar.gz"], prerelease=True)],
            pre_release=True,
        )

        assert release.version == "v0.12.0-rc.1"

    def test_no_qualifying_release_raises(self, make_response) -> None:
        with pytest.raises(ReleaseLookupError, match="No qualifying release"):
            self._fetch(make_response, [_release("v0.12.0-rc.1", ["x"], prerelease=True)])

    def test_empty_list_raises(self, make_response) -> None:
        with pytest.raises(ReleaseLookupError):
            self._fetch(make_response, [])

    def test_non_list_payload_raises(self, make_response) -> None:
        with pytest.raises(ReleaseLookupError, match="expected a list"):
            self._fetch(make_response, {"message": "Not Found"})

    def test_invalid_json_raises(self, make_response) -> None:
        with patch(
            "kclserver.bootstrap.releases.secure_urlopen",
            return_value=make_response(b"<html>"),
        ):
            with pytest.raises(ReleaseLookupError, match="Invalid release data"):
                latest_github_release(KCL_REPOSITORY)

    def test_http_error_raises(self) -> None:
        error = HTTPError("https://api.github.com", 403, "rate limited", {}, None)
        with patch("kclserver.bootstrap.releases.secure_urlopen", side_effect=error):
            with pytest.raises(ReleaseLookupError, match="HTTP 403") as exc_info:
                latest_github_release(KCL_REPOSITORY)
        assert exc_info.value.__cause__ is error

    def test_network_error_raises(self) -> None:
        with patch("kclserver.bootstrap.releases.secure_urlopen", side_effect=URLError("offline")):
            with pytest.raises(ReleaseLookupError, match="offline"):
                latest_github_release(KCL_REPOSITORY)

    def test_requests_releases_endpoint(self, make_response) -> None:
        self._fetch(make_response, [_release("v0.11.0", ["y"])])

        url = self.mock_open.call_args.args[0]
        assert url.startswith(f"{GITHUB_API_BASE}/repos/kcl-lang/kcl/releases")

    def test_custom_api_url(self, make_response) -> None:
        self._fetch(
            make_response,
            [_release("v0.11.0", ["y"])],
            api_url="https://ghe.example.com/api/v3/",
        )

        url = self.mock_open.call_args.args[0]
        assert url.startswith("https://ghe.example.com/api/v3/repos/kcl-lang/kcl/releases")

    def test_token_is_sent_as_bearer(self, make_response) -> None:
        self._fetch(make_response, [_release("v0.11.0", ["y"])], token="secret")

        headers = self.mock_open.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"

    def test_no_authorization_without_token(self, make_response) -> None:
        self._fetch(make_response, [_release("v0.11.0", ["y"])])

        headers = self.mock_open.call_args.kwargs["headers"]
        assert "Authorization" not in headers
