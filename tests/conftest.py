"""
Pytest configuration and fixtures
"""
import pytest
import os
import sys
import tempfile
import shutil

import numpy as np

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)


@pytest.fixture(autouse=True)
def isolated_app_data(tmp_path, monkeypatch):
    """Keep config, logs and default output out of the real home directory"""
    app_home = tmp_path / "app_home"
    monkeypatch.setenv("EXR_IMPORT_HOME", str(app_home))
    return app_home


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp(prefix="exr_import_test_")
    yield temp_path
    # Cleanup after test
    if os.path.exists(temp_path):
        shutil.rmtree(temp_path)


@pytest.fixture
def temp_config(temp_dir):
    """Path for a temporary config file"""
    return os.path.join(temp_dir, "config.json")


def plane(value, width=2, height=2, dtype=np.float32):
    """Constant (height, width) sample plane"""
    return np.full((height, width), value, dtype=dtype)


@pytest.fixture
def make_file():
    """Factory building a loaded File from {full channel name: array}"""
    from exr_import.decoder import ArrayDecoder
    from exr_import.exr_file import File

    def _make(channels, path="test.exr"):
        exr_file = File(path, decoder=ArrayDecoder(channels))
        assert exr_file.load(), exr_file.load_error
        return exr_file

    return _make


@pytest.fixture
def rgba_channels():
    """2x2 RGBA planes with distinct constant values"""
    return {
        'R': plane(1.0),
        'G': plane(0.5),
        'B': plane(0.0),
        'A': plane(1.0),
    }


# Mark slow tests
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "requires_openexr: marks tests that need the OpenEXR bindings"
    )
