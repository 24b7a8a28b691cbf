# sbom_ingest/utilities/__init__.py
