"""
Document code and version numbering.

Codes look like ``SDG-FIN-WI-01``: prefix, first three letters of the
department, document-type abbreviation, sequence. Versions are ``major.minor``
strings bumped by 0.1 per code lineage.
"""
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable, Mapping, Optional, Union

from sop_documents.models.document_models import SopDocument

CODE_PREFIX = "SDG"
CODE_SEQUENCE = "01"
FIRST_VERSION = "1.0"

TYPE_ABBREVIATIONS = {
    "sop": "SOP",
    "policy": "POL",
    "work instruction": "WI",
    "form": "FORM",
}

_STEP = Decimal("0.1")

# Leading number of a version string, the way parseFloat reads it ("2.0 (draft)" -> 2.0).
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
# Past this parseFloat gives Infinity, which counts as unusable.
_FLOAT_MAX = Decimal("1.7976931348623157e308")


def _first_letters(value: Optional[str], count: int = 3) -> str:
    return "".join(ch for ch in str(value or "") if ch.isalpha())[:count].upper()


def type_abbreviation(document_type: Optional[str]) -> str:
    key = " ".join(str(document_type or "").split()).lower()
    if key in TYPE_ABBREVIATIONS:
        return TYPE_ABBREVIATIONS[key]
    return _first_letters(document_type) or "DOC"


def generate_document_code(
    department: Optional[str],
    document_type: Optional[str],
    *,
    prefix: str = CODE_PREFIX,
    sequence: str = CODE_SEQUENCE,
) -> str:
    dept = _first_letters(department) or "GEN"
    return f"{prefix}-{dept}-{type_abbreviation(document_type)}-{sequence}"


def parse_version(value: object) -> Decimal:
    """Numeric value of a version string; anything unusable counts as 0."""
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return Decimal(0)
    try:
        parsed = Decimal(match.group(0).strip())
    except ArithmeticError:
        return Decimal(0)
    if not parsed.is_finite() or abs(parsed) > _FLOAT_MAX:
        return Decimal(0)
    return parsed


DocLike = Union[SopDocument, Mapping[str, object]]


def _code_of(doc: DocLike) -> str:
    if isinstance(doc, SopDocument):
        return doc.document_code
    return str(doc.get("documentCode") or doc.get("document_code") or "")


def _version_of(doc: DocLike) -> object:
    if isinstance(doc, SopDocument):
        return doc.version_number
    return doc.get("versionNumber", doc.get("version_number"))


def bump_version(version: object) -> str:
    current = parse_version(version)
    with localcontext() as ctx:
        # Enough digits to keep one decimal place for very large versions.
        ctx.prec = max(ctx.prec, current.adjusted() + 3)
        return str((current + _STEP).quantize(_STEP, rounding=ROUND_HALF_UP))


def next_version_number(existing_docs: Iterable[DocLike], document_code: str) -> str:
    versions = [parse_version(_version_of(d)) for d in existing_docs or () if _code_of(d) == document_code]
    if not versions:
        return FIRST_VERSION
    return bump_version(max(versions))
