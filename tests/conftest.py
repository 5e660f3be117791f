"""
Pytest configuration for the typeshape test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Isolation from the user's real ~/.typeshape and .typeshape config
- Common fixtures for temp directories and sample schema documents
- Marker-based test organization
"""

import os
import json
import shutil
import tempfile
from pathlib import Path

import pytest

from typeshape.logging_config import setup_logging


TEST_FILES_DIR = Path(__file__).parent / "test_files"


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Configure pytest for quiet, machine-mode operation."""
    os.environ.setdefault("TYPESHAPE_MACHINE_MODE", "1")


# ============================================================================
# LOGGING / ISOLATION FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, force=True)
    yield
    setup_logging(level="DEBUG", suppress_console=True, force=True)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """
    Point HOME and the working directory at an empty temp dir and clear
    TYPESHAPE_* settings so no real config file or env var leaks in.
    """
    from typeshape.cli.config import CLIConfig
    from typeshape.user_config import reset_user_config

    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.chdir(project)
    for key in (
        "TYPESHAPE_INDENT_UNIT",
        "TYPESHAPE_INDENT_REPEAT",
        "TYPESHAPE_DEPTH_LIMIT",
        "TYPESHAPE_INCLUDE_INHERITED",
        "TYPESHAPE_EXPAND_BUILTINS",
        "TYPESHAPE_HUMAN_MODE",
        "TYPESHAPE_FILE_LOGGING",
        "TYPESHAPE_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)

    reset_user_config()
    CLIConfig.reset()
    yield project
    reset_user_config()
    CLIConfig.reset()


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="typeshape_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


# ============================================================================
# SAMPLE DATA FIXTURES
# ============================================================================

@pytest.fixture
def sample_schema_path():
    """Path to the bundled sample schema document."""
    return TEST_FILES_DIR / "sample_schema.json"


@pytest.fixture
def sample_schema(sample_schema_path):
    """The bundled sample schema document as a dict."""
    with open(sample_schema_path, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def sample_types_path():
    """Path to the sample Python types module."""
    return TEST_FILES_DIR / "sample_types.py"


@pytest.fixture
def sample_types(sample_types_path):
    """The sample Python types module, loaded through the reflection provider."""
    import importlib
    from typeshape.metadata import ReflectionProvider

    assert ReflectionProvider().load_path(sample_types_path)
    return importlib.import_module("sample_types")
