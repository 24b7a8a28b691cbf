# tests/unit/parsers/test_licenses.py

import pytest

from sbom_ingest.parsers.licenses import (
    LicenseExpression,
    NamedLicense,
    license_choices_from_cyclonedx,
    license_choices_from_spdx,
    license_tokens,
    split_license_expression,
)


class TestSplitLicenseExpression:

    @pytest.mark.parametrize("expression, expected", [
        ("MIT", ["MIT"]),
        ("MIT OR Apache-2.0", ["MIT", "Apache-2.0"]),
        ("(MIT AND BSD-3-Clause) OR Apache-2.0", ["MIT", "BSD-3-Clause", "Apache-2.0"]),
        ("MIT or Apache-2.0", ["MIT", "Apache-2.0"]),
        ("GPL-2.0-only WITH Classpath-exception-2.0", ["GPL-2.0-only WITH Classpath-exception-2.0"]),
        ("MIT AND MIT", ["MIT"]),
        ("NOASSERTION", []),
        ("", []),
    ])
    def test_split(self, expression, expected):
        assert split_license_expression(expression) == expected


class TestLicenseTokens:

    def test_mixed_variants_keep_first_seen_order(self):
        choices = [NamedLicense("MIT"), LicenseExpression("Apache-2.0 OR MIT"), NamedLicense("ISC")]
        assert license_tokens(choices) == ["MIT", "Apache-2.0", "ISC"]

    def test_placeholder_names_are_dropped(self):
        assert license_tokens([NamedLicense("NOASSERTION"), NamedLicense("  "), NamedLicense("none")]) == []


class TestCycloneDXLicenseChoices:

    def test_all_entry_shapes(self):
        entries = [
            {"license": {"id": "MIT"}},
            {"license": {"name": "Custom License"}},
            {"expression": "Apache-2.0 OR BSD-2-Clause"},
            {"id": "ISC"},
            {"license": {}},
            "garbage",
        ]
        assert license_choices_from_cyclonedx(entries) == [
            NamedLicense("MIT"),
            NamedLicense("Custom License"),
            LicenseExpression("Apache-2.0 OR BSD-2-Clause"),
            NamedLicense("ISC"),
        ]

    def test_id_wins_over_name(self):
        assert license_choices_from_cyclonedx([{"license": {"id": "MIT", "name": "MIT License"}}]) == [NamedLicense("MIT")]

    @pytest.mark.parametrize("entries", [None, {}, "MIT"])
    def test_non_list_yields_nothing(self, entries):
        assert license_choices_from_cyclonedx(entries) == []


class TestSpdxLicenseChoices:

    def test_wraps_each_field_as_expression(self):
        assert license_choices_from_spdx("MIT", None, "  ", "Apache-2.0") == [
            LicenseExpression("MIT"),
            LicenseExpression("Apache-2.0"),
        ]
