# sbom_ingest/parsers/base.py
"""
Building blocks shared by the format-specific parsers.

A parser turns document text into a RawParseOutput: mutable component
drafts (licenses still in their tagged form), vulnerabilities whose
``affected_components`` still hold native refs, and the id-mapping table the
reference resolver needs. The normalizer turns that into a ParseResult.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from json.decoder import scanstring
from json.scanner import NUMBER_RE
from typing import Any, Dict, List, Optional, Tuple

from ..config import DEFAULT_CONFIG, ParserConfig
from ..exceptions import InvalidJsonError
from ..models import ComponentType, Hash, ParseMetadata, Vulnerability
from .licenses import LicenseChoice

logger = logging.getLogger("sbom-ingest")


@dataclass
class ComponentDraft:
    """A component as read from the document, before normalization."""
    id: str
    name: str
    type: ComponentType = ComponentType.LIBRARY
    version: Optional[str] = None
    license_choices: List[LicenseChoice] = field(default_factory=list)
    purl: Optional[str] = None
    cpe: Optional[str] = None
    hashes: List[Hash] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    description: Optional[str] = None
    supplier: Optional[str] = None
    download_location: Optional[str] = None
    native_ref: Optional[str] = None

    def add_dependency(self, component_id: str) -> None:
        if component_id not in self.dependencies:
            self.dependencies.append(component_id)


@dataclass
class RawParseOutput:
    """Everything a parser produced for one document."""
    metadata: ParseMetadata
    components: List[ComponentDraft] = field(default_factory=list)
    vulnerabilities: List[Vulnerability] = field(default_factory=list)
    id_map: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def register_ref(self, native_ref: Optional[str], component_id: str) -> None:
        """Record a native ref -> canonical id mapping; first registration wins."""
        if native_ref:
            self.id_map.setdefault(native_ref, component_id)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


class BaseParser:
    """Common plumbing for the CycloneDX and SPDX parsers."""

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def parse_raw(self, text: str, filename: Optional[str] = None) -> RawParseOutput:
        raise NotImplementedError

    def checkpoint(self) -> None:
        self.config.run_checkpoint()


_WHITESPACE = re.compile(r"[ \t\n\r]*")
_CONSTANTS = (
    ("null", None),
    ("true", True),
    ("false", False),
    ("NaN", float("nan")),
    ("Infinity", float("inf")),
    ("-Infinity", float("-inf")),
)


def _skip_whitespace(text: str, idx: int) -> int:
    return _WHITESPACE.match(text, idx).end()


def _read_key(text: str, idx: int) -> Tuple[str, int]:
    if not text.startswith('"', idx):
        raise json.JSONDecodeError("Expecting property name enclosed in double quotes", text, idx)
    key, idx = scanstring(text, idx + 1)
    idx = _skip_whitespace(text, idx)
    if not text.startswith(":", idx):
        raise json.JSONDecodeError("Expecting ':' delimiter", text, idx)
    return key, _skip_whitespace(text, idx + 1)


def _read_scalar(text: str, idx: int) -> Tuple[Any, int]:
    if text.startswith('"', idx):
        return scanstring(text, idx + 1)
    match = NUMBER_RE.match(text, idx)
    if match is not None:
        integer, fraction, exponent = match.groups()
        if fraction or exponent:
            return float(integer + (fraction or "") + (exponent or "")), match.end()
        return int(integer), match.end()
    for literal, value in _CONSTANTS:
        if text.startswith(literal, idx):
            return value, idx + len(literal)
    raise json.JSONDecodeError("Expecting value", text, idx)


def decode_json_iteratively(text: str) -> Any:
    """
    Decode JSON text using an explicit stack of open containers.

    Produces the same value as json.loads, but nesting depth is bounded only
    by memory, not by the interpreter's recursion limit.

    Raises:
        json.JSONDecodeError: If the text is not a single JSON value
    """
    # Each entry is (container, key holder); the key holder is None for arrays.
    stack: List[Tuple[Any, Optional[List[str]]]] = []
    idx = _skip_whitespace(text, 0)
    while True:
        opener = text[idx:idx + 1]
        if opener == "{":
            idx = _skip_whitespace(text, idx + 1)
            if text.startswith("}", idx):
                value, idx = {}, idx + 1
            else:
                key, idx = _read_key(text, idx)
                stack.append(({}, [key]))
                continue
        elif opener == "[":
            idx = _skip_whitespace(text, idx + 1)
            if text.startswith("]", idx):
                value, idx = [], idx + 1
            else:
                stack.append(([], None))
                continue
        else:
            value, idx = _read_scalar(text, idx)

        # Store the finished value, closing every container it completes.
        while True:
            if not stack:
                end = _skip_whitespace(text, idx)
                if end != len(text):
                    raise json.JSONDecodeError("Extra data", text, end)
                return value
            container, key_holder = stack[-1]
            if key_holder is None:
                container.append(value)
            else:
                container[key_holder[0]] = value
            idx = _skip_whitespace(text, idx)
            delimiter = text[idx:idx + 1]
            if delimiter == ",":
                idx = _skip_whitespace(text, idx + 1)
                if key_holder is not None:
                    key_holder[0], idx = _read_key(text, idx)
                break
            if delimiter != ("]" if key_holder is None else "}"):
                raise json.JSONDecodeError("Expecting ',' delimiter", text, idx)
            stack.pop()
            value, idx = container, idx + 1


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except RecursionError:
        logger.debug("Document nesting exceeds the recursion limit; decoding with an explicit stack")
        return decode_json_iteratively(text)


def load_json_document(text: Any, filename: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse document text into a JSON object.

    Args:
        text: Raw document text (bytes are decoded as UTF-8)
        filename: Used only in error messages

    Returns:
        Dict[str, Any]: The top-level JSON object

    Raises:
        InvalidJsonError: If the text is not JSON or the top level is not an object
    """
    source = filename or "<input>"
    if isinstance(text, (bytes, bytearray)):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidJsonError(f"Invalid JSON in {source}: not UTF-8 text ({e})") from e
    if not isinstance(text, str):
        raise InvalidJsonError(f"Invalid JSON in {source}: expected text, got {type(text).__name__}")

    try:
        document = _decode(text.lstrip("\ufeff"))
    except json.JSONDecodeError as e:
        raise InvalidJsonError(
            f"Invalid JSON in {source}: {e.msg} (line {e.lineno}, column {e.colno})",
            details={"line": e.lineno, "column": e.colno},
        ) from e

    if not isinstance(document, dict):
        raise InvalidJsonError(f"Invalid JSON in {source}: top-level value must be an object, got {type(document).__name__}")
    return document


def text_or_none(value: Any) -> Optional[str]:
    """Return a stripped string, or None for empty / non-scalar values."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def list_field(document: Dict[str, Any], key: str, output: RawParseOutput) -> List[Any]:
    """Fetch an array field, recording a warning when it has the wrong shape."""
    value = document.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        output.warn(f"Ignoring '{key}': expected an array, got {type(value).__name__}")
        return []
    return value


def parse_timestamp(value: Any, label: str, output: RawParseOutput) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; unparsable values are dropped with a warning."""
    text = text_or_none(value)
    if text is None:
        return None
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        output.warn(f"Dropping unparsable timestamp for {label}: {text!r}")
        return None
