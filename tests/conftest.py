"""Shared fixtures: temporary asset folders and build requests."""

from __future__ import annotations

from pathlib import Path

import pytest

from atlaspacker.config import BuildRequest


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    folder = tmp_path / "assets"
    folder.mkdir()
    return folder


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def make_request(assets_dir: Path, out_dir: Path):
    def factory(**overrides) -> BuildRequest:
        settings = {
            "name": "atlas",
            "output_directory": out_dir,
            "source_folders": [assets_dir],
        }
        settings.update(overrides)
        return BuildRequest(**settings)

    return factory
