# tests/unit/handlers/test_parse_handler.py

import json

import pytest
from unittest.mock import patch

from sbom_ingest.exceptions import (
    InvalidJsonError,
    MissingRequiredFieldError,
    SbomIngestError,
    UnsupportedFormatError,
)
from sbom_ingest.handlers.parse import build_parser_config, handle_parse


class TestParseHandler:
    """Test cases for the parse handler."""

    def test_parse_success(self, mock_params, write_sbom, cyclonedx_vuln_doc, capsys):
        mock_params.command = 'parse'
        mock_params.path = write_sbom(cyclonedx_vuln_doc)

        assert handle_parse(mock_params) is True
        out = capsys.readouterr().out
        assert "Components: 1" in out
        assert "Vulnerabilities: 1" in out
        assert "High" in out

    def test_parse_saves_output(self, mock_params, write_sbom, spdx_doc, spdx_package, tmp_path):
        mock_params.command = 'parse'
        mock_params.path = write_sbom(spdx_doc([spdx_package(1), spdx_package(2)]), "app.spdx.json")
        mock_params.output = str(tmp_path / "results" / "normalized.json")
        mock_params.include_warnings = True

        handle_parse(mock_params)

        with open(mock_params.output, encoding="utf-8") as f:
            saved = json.load(f)
        assert saved["metadata"]["componentCount"] == 2
        assert saved["metadata"]["dataLicense"] == "CC0-1.0"
        assert saved["warnings"] == []
        assert saved["vulnerabilities"] == []

    def test_show_components(self, mock_params, write_sbom, cyclonedx_doc, capsys):
        mock_params.command = 'parse'
        mock_params.path = write_sbom(cyclonedx_doc)
        mock_params.show_components = True

        handle_parse(mock_params)
        out = capsys.readouterr().out
        assert "express@4.18.0 [library] licenses: MIT" in out
        assert "lodash@4.17.21" in out

    @pytest.mark.parametrize("content, expected", [
        ("{ this is not valid json }", InvalidJsonError),
        ('{"hello": "world"}', UnsupportedFormatError),
        ('{"spdxVersion": "SPDX-2.3"}', MissingRequiredFieldError),
    ])
    def test_parse_errors_propagate(self, mock_params, write_sbom, content, expected, capsys):
        mock_params.command = 'parse'
        mock_params.path = write_sbom(content)

        with pytest.raises(expected):
            handle_parse(mock_params)
        assert "❌" in capsys.readouterr().out

    @patch('sbom_ingest.handlers.parse.parse_sbom', side_effect=KeyError("unexpected"))
    def test_unexpected_errors_are_wrapped(self, mock_parse, mock_params, write_sbom, cyclonedx_doc):
        mock_params.command = 'parse'
        mock_params.path = write_sbom(cyclonedx_doc)

        with pytest.raises(SbomIngestError, match="Failed to execute parse"):
            handle_parse(mock_params)


class TestBuildParserConfig:

    def test_maps_options(self, mock_params):
        mock_params.unknown_severity = "low"
        mock_params.derive_severity = True
        mock_params.strict = True

        config = build_parser_config(mock_params)
        assert config.unknown_severity == "low"
        assert config.derive_severity_from_score is True
        assert config.strict_schema is True
