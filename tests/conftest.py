"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from tenkiconv.config import TenkiConvSettings, set_settings
from tenkiconv.parser.models import Record, Section

# Import CLI fixtures to make them available globally
from tests.cli_fixtures import clean_runner, cli_invoke  # noqa: F401
from tests.script_builders import (
    SAMPLE_LINES,
    SAMPLE_RECORDS,
    SCENE_ID,
    copy_records,
    write_script,
    write_section,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every test with default settings, free of env and config files."""
    for name in list(os.environ):
        if name.startswith("TENKICONV_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)

    settings = TenkiConvSettings(_env_file=None)
    set_settings(settings)

    yield settings

    import tenkiconv.config.settings as settings_module

    settings_module._settings = None


@pytest.fixture
def sample_records() -> list[Record]:
    return copy_records(SAMPLE_RECORDS)


@pytest.fixture
def section_resolver() -> Callable[..., Callable[[str], Section]]:
    """Build an in-memory section resolver from ``{scene_id: records}``."""

    def build(sections: dict[str, list[Record]]) -> Callable[[str], Section]:
        def resolve(scene_id: str) -> Section:
            return Section(
                path=Path(f"{scene_id}.spt"),
                records=copy_records(sections[scene_id]),
                scene_id=scene_id,
            )

        return resolve

    return build


@pytest.fixture
def sample_document(section_resolver):
    """The sample script parsed against in-memory records."""
    from tenkiconv.parser import parse_lines

    return parse_lines(SAMPLE_LINES, section_resolver({SCENE_ID: SAMPLE_RECORDS}))


@pytest.fixture
def sample_bundle(tmp_path) -> Path:
    """A script with its section file on disk; returns the script path."""
    bundle_dir = tmp_path / "bundle"
    bundle_dir.mkdir()
    write_section(bundle_dir, SCENE_ID, SAMPLE_RECORDS)
    return write_script(bundle_dir / "scene.txt", SAMPLE_LINES)
