# tests/unit/core/test_normalizer.py

from sbom_ingest.models import ParseMetadata, SbomFormat, Vulnerability
from sbom_ingest.normalizer import normalize
from sbom_ingest.parsers.base import ComponentDraft, RawParseOutput
from sbom_ingest.parsers.licenses import LicenseExpression, NamedLicense


def make_raw(components, vulnerabilities=()):
    return RawParseOutput(
        metadata=ParseMetadata(format=SbomFormat.CYCLONEDX, format_version="1.5", component_count=99),
        components=list(components),
        vulnerabilities=list(vulnerabilities),
    )


class TestNormalize:

    def test_duplicates_keep_first_occurrence(self):
        raw = make_raw([
            ComponentDraft(id="cdx-1", name="first"),
            ComponentDraft(id="cdx-2", name="other"),
            ComponentDraft(id="cdx-1", name="second"),
        ])
        result = normalize(raw)

        assert result.component_ids() == ["cdx-1", "cdx-2"]
        assert result.get_component("cdx-1").name == "first"
        assert result.metadata.component_count == 2
        assert any("duplicate" in w for w in result.warnings)

    def test_licenses_are_sorted_and_unique(self):
        raw = make_raw([ComponentDraft(id="cdx-1", name="lib", license_choices=[
            NamedLicense("MIT"),
            LicenseExpression("Zlib OR Apache-2.0 OR MIT"),
        ])])
        assert normalize(raw).components[0].licenses == ("Apache-2.0", "MIT", "Zlib")

    def test_dependencies_deduped_and_dangling_dropped(self):
        raw = make_raw([
            ComponentDraft(id="cdx-1", name="a", dependencies=["cdx-2", "cdx-2", "cdx-missing"]),
            ComponentDraft(id="cdx-2", name="b"),
        ])
        result = normalize(raw)

        assert result.get_component("cdx-1").dependencies == ("cdx-2",)
        assert len(result.warnings) == 1
        assert "cdx-missing" in result.warnings[0]

    def test_self_dependency_dropped(self):
        raw = make_raw([ComponentDraft(id="cdx-1", name="a", dependencies=["cdx-1"])])
        result = normalize(raw)

        assert result.get_component("cdx-1").dependencies == ()
        assert result.warnings == ("Dropping self-dependency of component cdx-1",)

    def test_counts_and_vulnerabilities_pass_through(self):
        vulnerability = Vulnerability(id="CVE-1", affected_components=("raw-ref",))
        result = normalize(make_raw([ComponentDraft(id="cdx-1", name="a")], [vulnerability]))

        assert result.vulnerabilities == (vulnerability,)
        assert result.metadata.vulnerability_count == 1
        assert result.metadata.component_count == 1

    def test_parser_warnings_are_kept(self):
        raw = make_raw([])
        raw.warnings.append("from the parser")
        assert normalize(raw).warnings == ("from the parser",)

    def test_idempotent(self):
        raw = make_raw([
            ComponentDraft(id="cdx-1", name="a", license_choices=[LicenseExpression("MIT OR Apache-2.0")],
                           dependencies=["cdx-2"]),
            ComponentDraft(id="cdx-2", name="b"),
            ComponentDraft(id="cdx-2", name="b-again"),
        ])
        once = normalize(raw)
        twice = normalize(once)

        assert twice == once
        assert twice.warnings == once.warnings
