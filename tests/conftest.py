"""Shared pytest fixtures."""

from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Dict
from unittest.mock import MagicMock

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point KCLSERVER_HOME at a temporary directory for every test."""
    home = tmp_path / "kclserver-home"
    monkeypatch.setenv("KCLSERVER_HOME", str(home))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    return home


def build_tarball(files: Dict[str, bytes]) -> bytes:
    """Build an in-memory .tar.gz with the given member names and contents."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def build_zip(files: Dict[str, bytes]) -> bytes:
    """Build an in-memory .zip with the given member names and contents."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def fake_response(payload: bytes) -> MagicMock:
    """A context manager standing in for an urlopen() response."""
    response = MagicMock()
    response.__enter__.return_value = io.BytesIO(payload)
    response.__exit__.return_value = False
    return response


@pytest.fixture
def make_tarball():
    return build_tarball


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def make_response():
    return fake_response
