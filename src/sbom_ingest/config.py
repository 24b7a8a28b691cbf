# sbom_ingest/config.py

import os
from dataclasses import dataclass
from typing import Callable, Optional

from .exceptions import ConfigurationError

CANONICAL_SEVERITIES = ("critical", "high", "medium", "low", "none")


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ParserConfig:
    """
    Tunables for a single pipeline invocation.

    Attributes:
        unknown_severity: Canonical severity used when a rating carries a token
            outside the canonical set (default: "none").
        derive_severity_from_score: When the chosen rating has a score but no
            severity token, derive one from the CVSS v3 qualitative bands.
        strict_schema: Run the official CycloneDX / SPDX schema validators
            during validation.
        checkpoint: Optional zero-argument callable invoked between top-level
            passes. Raise from it to cancel a long parse.
    """
    unknown_severity: str = "none"
    derive_severity_from_score: bool = False
    strict_schema: bool = False
    checkpoint: Optional[Callable[[], None]] = None

    def __post_init__(self):
        self.unknown_severity = (self.unknown_severity or "").lower()
        if self.unknown_severity not in CANONICAL_SEVERITIES:
            raise ConfigurationError(
                f"Invalid unknown_severity '{self.unknown_severity}'. "
                f"Expected one of: {', '.join(CANONICAL_SEVERITIES)}"
            )

    @classmethod
    def from_env(cls) -> "ParserConfig":
        """Build a config from SBOM_INGEST_* environment variables."""
        return cls(
            unknown_severity=os.getenv("SBOM_INGEST_UNKNOWN_SEVERITY", "none"),
            derive_severity_from_score=env_flag("SBOM_INGEST_DERIVE_SEVERITY"),
            strict_schema=env_flag("SBOM_INGEST_STRICT"),
        )

    def run_checkpoint(self) -> None:
        if self.checkpoint is not None:
            self.checkpoint()


DEFAULT_CONFIG = ParserConfig()
