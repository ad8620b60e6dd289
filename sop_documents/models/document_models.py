"""
Document domain models for the SOP documents feature.

Keeps the data layer independent from UI and storage details. Documents are
immutable: the workflow engine derives a new instance for every transition,
so callers holding the previous instance never observe a change.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from sop_documents.enum.document_status import DocumentStatus
from sop_documents.exceptions.errors import ValidationError


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    email: str = ""

    @classmethod
    def from_value(cls, value: Any) -> "Person":
        if isinstance(value, Person):
            return value
        if isinstance(value, Mapping):
            pid = str(value.get("id") or value.get("email") or value.get("name") or "").strip()
            return cls(id=pid, name=str(value.get("name") or pid), email=str(value.get("email") or ""))
        name = str(value or "").strip()
        return cls(id=name, name=name)

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "email": self.email}


def unique_people(values: Optional[Iterable[Any]]) -> Tuple[Person, ...]:
    """Normalize to Persons, dropping repeated ids; first assignment wins."""
    seen = set()
    out = []
    for raw in values or ():
        person = Person.from_value(raw)
        if not person.id or person.id in seen:
            continue
        seen.add(person.id)
        out.append(person)
    return tuple(out)


PEOPLE_FIELDS = ("document_owners", "reviewers", "document_creators", "compliance_names", "current_reviewers")


@dataclass(frozen=True)
class SopDocument:
    id: str
    status: DocumentStatus = DocumentStatus.DRAFT
    sop_name: str = ""

    document_code: str = ""
    version_number: str = "1.0"

    country: str = ""
    department: str = ""
    document_type: str = ""

    document_owners: Tuple[Person, ...] = ()
    reviewers: Tuple[Person, ...] = ()
    document_creators: Tuple[Person, ...] = ()
    compliance_names: Tuple[Person, ...] = ()
    current_reviewers: Tuple[Person, ...] = ()

    # ISO dates (YYYY-MM-DD)
    last_revision_date: Optional[str] = None
    next_revision_date: Optional[str] = None

    # Set by the external SLA scheduler; never written by the engine.
    is_breached: bool = False

    pending_with: Optional[str] = None
    comments: Tuple[str, ...] = ()

    created_at: Optional[str] = None
    upload_date: Optional[str] = None

    # Number of review cycles entered; 0 for upload-bypass documents.
    review_cycle: int = 0

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "status", DocumentStatus.parse(self.status))
        except ValueError as ex:
            raise ValidationError(str(ex), field="status") from ex
        for name in PEOPLE_FIELDS:
            object.__setattr__(self, name, unique_people(getattr(self, name)))
        object.__setattr__(self, "comments", tuple(str(c) for c in (self.comments or ())))
        object.__setattr__(self, "review_cycle", int(self.review_cycle or 0))

    # ------------------------------------------------------------------ #
    def evolve(self, **changes: Any) -> "SopDocument":
        return replace(self, **changes)

    def with_comment(self, text: str) -> "SopDocument":
        return replace(self, comments=self.comments + (text,))

    @property
    def display_name(self) -> str:
        """<document_code>_<sop_name> when a code exists, else the name."""
        if self.document_code and self.sop_name:
            return f"{self.document_code}_{self.sop_name}"
        return self.sop_name or self.document_code or self.id

    # ------------------------------------------------------------------ #
    #  Mapping (camelCase, as produced and consumed by the UI layer)
    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in PEOPLE_FIELDS:
                value = [p.to_dict() for p in value]
            elif f.name == "comments":
                value = list(value)
            elif f.name == "status":
                value = value.value
            out[_CAMEL[f.name]] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SopDocument":
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            camel = _CAMEL[f.name]
            if camel in data:
                kwargs[f.name] = data[camel]
            elif f.name in data:
                kwargs[f.name] = data[f.name]
        if not str(kwargs.get("id") or "").strip():
            raise ValidationError("Document id is required.", field="id")
        kwargs["id"] = str(kwargs["id"])
        if kwargs.get("is_breached") is not None:
            kwargs["is_breached"] = bool(kwargs["is_breached"])
        for name in ("sop_name", "document_code", "country", "department", "document_type"):
            if kwargs.get(name) is None and name in kwargs:
                kwargs[name] = ""
        if kwargs.get("version_number") in (None, ""):
            kwargs.pop("version_number", None)
        return cls(**kwargs)


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


_CAMEL = {f.name: camel_case(f.name) for f in fields(SopDocument)}
