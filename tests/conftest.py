import json

import pytest


def _dump(document):
    return json.dumps(document, indent=2)


@pytest.fixture
def to_text():
    """Serialize a document dict to JSON text, the way files arrive on disk."""
    return _dump


@pytest.fixture
def cyclonedx_doc():
    """A CycloneDX 1.5 BOM with two libraries (express, lodash) and a described subject."""
    return {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "serialNumber": "urn:uuid:3e671687-395b-41f5-a30f-a58921a69b79",
        "version": 1,
        "metadata": {
            "timestamp": "2024-01-15T10:00:00Z",
            "component": {
                "type": "application",
                "bom-ref": "pkg:npm/my-app@1.0.0",
                "name": "my-app",
                "version": "1.0.0",
            },
        },
        "components": [
            {
                "type": "library",
                "bom-ref": "pkg:npm/express@4.18.0",
                "name": "express",
                "version": "4.18.0",
                "licenses": [{"expression": "MIT"}],
                "purl": "pkg:npm/express@4.18.0",
            },
            {
                "type": "library",
                "bom-ref": "pkg:npm/lodash@4.17.21",
                "name": "lodash",
                "version": "4.17.21",
                "licenses": [{"license": {"id": "MIT"}}],
                "purl": "pkg:npm/lodash@4.17.21",
            },
        ],
    }


@pytest.fixture
def cyclonedx_vuln_doc():
    """A CycloneDX BOM with one component and one CVSSv31-rated vulnerability."""
    return {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "version": 1,
        "components": [
            {
                "type": "library",
                "bom-ref": "pkg:npm/express@4.18.0",
                "name": "express",
                "version": "4.18.0",
                "purl": "pkg:npm/express@4.18.0",
            },
        ],
        "vulnerabilities": [
            {
                "id": "CVE-2023-12345",
                "source": {
                    "name": "NVD",
                    "url": "https://nvd.nist.gov/vuln/detail/CVE-2023-12345",
                },
                "ratings": [
                    {
                        "severity": "HIGH",
                        "score": 7.5,
                        "method": "CVSSv31",
                        "vector": "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:N/A:N",
                    },
                ],
                "description": "A vulnerability in express",
                "affects": [{"ref": "pkg:npm/express@4.18.0"}],
                "published": "2023-01-15T10:00:00Z",
                "modified": "2023-01-20T10:00:00Z",
            },
        ],
    }


@pytest.fixture
def spdx_package():
    """Factory for SPDX package entries."""
    def _package(index=1, **overrides):
        package = {
            "SPDXID": f"SPDXRef-Package-{index}",
            "name": f"package-{index}",
            "versionInfo": f"{index}.0.0",
            "downloadLocation": "https://example.com",
            "filesAnalyzed": False,
            "licenseConcluded": "MIT",
        }
        package.update(overrides)
        return package
    return _package


@pytest.fixture
def spdx_doc():
    """Factory for SPDX 2.3 documents."""
    def _doc(packages=None, **overrides):
        document = {
            "spdxVersion": "SPDX-2.3",
            "dataLicense": "CC0-1.0",
            "SPDXID": "SPDXRef-DOCUMENT",
            "name": "test-project",
            "documentNamespace": "https://example.com/test",
            "packages": packages if packages is not None else [],
        }
        document.update(overrides)
        return document
    return _doc
