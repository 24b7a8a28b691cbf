# sbom_ingest/parsers/licenses.py
"""
License extraction shared by the CycloneDX and SPDX parsers.

Licenses reach us in several encodings. At the parse boundary each one is
captured as a tagged variant:

- NamedLicense: a single identifier or free-text name (CycloneDX ``{id}`` /
  ``{name}``).
- LicenseExpression: an SPDX-style boolean expression (CycloneDX
  ``{expression}``, SPDX ``licenseConcluded`` / ``licenseDeclared``).

license_tokens() flattens a list of variants into plain tokens. Expressions
are split on AND/OR; operator semantics are not evaluated.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

logger = logging.getLogger("sbom-ingest")

# SPDX sentinels that mean "no license information", not a license.
NON_LICENSE_VALUES = {"NOASSERTION", "NONE"}

_OPERATORS = {"AND", "OR"}


@dataclass(frozen=True)
class NamedLicense:
    name: str


@dataclass(frozen=True)
class LicenseExpression:
    expression: str


LicenseChoice = Union[NamedLicense, LicenseExpression]


def split_license_expression(expression: str) -> List[str]:
    """
    Split an SPDX license expression into its constituent identifiers.

    Parentheses are dropped and the expression is cut at every AND/OR
    operator. A ``WITH`` exception clause stays attached to its license, so
    ``GPL-2.0-only WITH Classpath-exception-2.0`` is a single token.

    Args:
        expression: The raw expression string

    Returns:
        List[str]: Tokens in expression order, duplicates removed
    """
    words = expression.replace("(", " ").replace(")", " ").split()
    tokens: List[str] = []
    current: List[str] = []

    def _flush():
        if current:
            token = " ".join(current)
            if token.upper() not in NON_LICENSE_VALUES and token not in tokens:
                tokens.append(token)
            current.clear()

    for word in words:
        if word.upper() in _OPERATORS:
            _flush()
        else:
            current.append(word)
    _flush()
    return tokens


def license_tokens(choices: Iterable[LicenseChoice]) -> List[str]:
    """Flatten license variants into unique tokens, keeping first-seen order."""
    tokens: List[str] = []
    for choice in choices:
        if isinstance(choice, LicenseExpression):
            candidates = split_license_expression(choice.expression)
        else:
            name = choice.name.strip()
            candidates = [name] if name and name.upper() not in NON_LICENSE_VALUES else []
        for token in candidates:
            if token not in tokens:
                tokens.append(token)
    return tokens


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def license_choices_from_cyclonedx(entries: Any) -> List[LicenseChoice]:
    """
    Read a CycloneDX ``licenses`` array.

    Accepts ``{"license": {"id": ...}}``, ``{"license": {"name": ...}}``,
    ``{"expression": ...}`` and the bare ``{"id": ...}`` / ``{"name": ...}``
    forms emitted by some generators.
    """
    if not isinstance(entries, list):
        return []

    choices: List[LicenseChoice] = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.debug(f"Ignoring non-object license entry: {entry!r}")
            continue

        expression = _as_text(entry.get("expression"))
        if expression:
            choices.append(LicenseExpression(expression))
            continue

        license_obj = entry.get("license") if isinstance(entry.get("license"), dict) else entry
        name = _as_text(license_obj.get("id")) or _as_text(license_obj.get("name"))
        if name:
            choices.append(NamedLicense(name))
        else:
            logger.debug(f"License entry carries no id, name or expression: {entry!r}")
    return choices


def license_choices_from_spdx(*values: Any) -> List[LicenseChoice]:
    """Wrap SPDX license fields (concluded, declared) as expressions."""
    return [LicenseExpression(text) for text in (_as_text(v) for v in values) if text]
