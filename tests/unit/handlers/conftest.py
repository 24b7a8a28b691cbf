# tests/unit/handlers/conftest.py

import argparse

import pytest


@pytest.fixture
def mock_params(mocker):
    """Provides a mocked argparse.Namespace for handler tests."""
    params = mocker.MagicMock(spec=argparse.Namespace)
    params.command = 'test-command'
    params.log = "INFO"
    params.path = None
    params.output = None
    params.include_warnings = False
    params.show_components = False
    params.unknown_severity = "none"
    params.derive_severity = False
    params.strict = False
    return params


@pytest.fixture
def write_sbom(tmp_path, to_text):
    """Write a document dict (or raw text) into tmp_path and return its path."""
    def _write(document, name="bom.json"):
        path = tmp_path / name
        path.write_text(document if isinstance(document, str) else to_text(document), encoding="utf-8")
        return str(path)
    return _write
