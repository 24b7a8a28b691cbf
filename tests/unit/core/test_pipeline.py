# tests/unit/core/test_pipeline.py

import importlib
import logging

import pytest

from sbom_ingest import pipeline
from sbom_ingest.config import ParserConfig
from sbom_ingest.exceptions import InvalidJsonError, MissingRequiredFieldError, UnsupportedFormatError
from sbom_ingest.models import SbomFormat
from sbom_ingest.pipeline import parse_as, parse_sbom


class TestParseSbom:

    def test_dispatches_cyclonedx(self, cyclonedx_doc, to_text):
        result = parse_sbom(to_text(cyclonedx_doc), "bom.json")
        assert result.metadata.format == SbomFormat.CYCLONEDX
        assert result.metadata.component_count == 2

    def test_dispatches_spdx(self, spdx_doc, spdx_package, to_text):
        result = parse_sbom(to_text(spdx_doc([spdx_package(1), spdx_package(2)])))
        assert result.metadata.format == SbomFormat.SPDX
        assert result.vulnerabilities == ()

    def test_accepts_bytes(self, cyclonedx_doc, to_text):
        assert parse_sbom(to_text(cyclonedx_doc).encode("utf-8")).metadata.component_count == 2

    @pytest.mark.parametrize("text", ["{}", "{\"bomFormat\": \"CycloneDX\"}", "not json", "[]"])
    def test_undetectable_documents(self, text):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            parse_sbom(text, "mystery.json")
        assert exc_info.value.kind == "unsupported-format"
        assert "mystery.json" in exc_info.value.message

    def test_parse_as_uses_given_format(self, cyclonedx_doc, to_text):
        with pytest.raises(MissingRequiredFieldError):
            parse_as(SbomFormat.SPDX, to_text(cyclonedx_doc))

    def test_parse_as_invalid_json(self):
        with pytest.raises(InvalidJsonError):
            parse_as("cyclonedx", "{")

    def test_vulnerability_links_to_canonical_component_id(self, cyclonedx_doc, to_text):
        cyclonedx_doc["vulnerabilities"] = [{
            "id": "CVE-2023-12345",
            "ratings": [{"severity": "high", "method": "CVSSv31", "score": 7.5}],
            "affects": [{"ref": "pkg:npm/express@4.18.0"}],
        }]
        result = parse_sbom(to_text(cyclonedx_doc))
        express = next(c for c in result.components if c.name == "express")

        assert len(result.components) == 2
        assert len(result.vulnerabilities) == 1
        assert result.vulnerabilities[0].affected_components == (express.id,)
        assert "pkg:npm/express@4.18.0" not in result.vulnerabilities[0].affected_components

    def test_results_are_independent(self, cyclonedx_doc, to_text):
        first = parse_sbom(to_text(cyclonedx_doc))
        second = parse_sbom(to_text(cyclonedx_doc))
        assert first == second
        assert first is not second


class TestCheckpoints:

    def test_checkpoint_runs_between_stages(self, mocker, spdx_doc, to_text):
        checkpoint = mocker.Mock()
        pipeline.parse_spdx(to_text(spdx_doc()), config=ParserConfig(checkpoint=checkpoint))
        # two inside the SPDX parser, two between pipeline stages
        assert checkpoint.call_count == 4

    def test_resolver_not_reached_when_cancelled(self, mocker, spdx_doc, to_text):
        resolve = mocker.patch("sbom_ingest.pipeline.resolve_references")
        calls = []

        def _checkpoint():
            calls.append(1)
            if len(calls) == 4:
                raise RuntimeError("cancelled")

        with pytest.raises(RuntimeError, match="cancelled"):
            pipeline.parse_spdx(to_text(spdx_doc()), config=ParserConfig(checkpoint=_checkpoint))
        resolve.assert_not_called()


class TestLogging:

    @pytest.mark.parametrize("module_name", [
        "sbom_ingest.parsers.base",
        "sbom_ingest.parsers.cyclonedx",
        "sbom_ingest.parsers.spdx",
        "sbom_ingest.parsers.detector",
        "sbom_ingest.parsers.licenses",
        "sbom_ingest.normalizer",
        "sbom_ingest.resolver",
        "sbom_ingest.pipeline",
        "sbom_ingest.validator",
    ])
    def test_library_modules_share_one_logger(self, module_name):
        assert importlib.import_module(module_name).logger.name == "sbom-ingest"

    def test_parse_warnings_are_logged(self, caplog, cyclonedx_doc, to_text):
        cyclonedx_doc["dependencies"] = [{"ref": "pkg:npm/express@4.18.0", "dependsOn": ["ghost"]}]
        with caplog.at_level(logging.WARNING, logger="sbom-ingest"):
            result = parse_sbom(to_text(cyclonedx_doc))

        assert result.warnings
        assert {record.name for record in caplog.records} == {"sbom-ingest"}
        assert [record.getMessage() for record in caplog.records] == list(result.warnings)
