"""Attestation record: the immutable binding of a revision to its fingerprint.

Python attributes are snake_case; the registry wire format is camelCase.
``to_payload`` and ``from_payload`` are the only places that know the wire
names.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from commitproof.core.snapshot.models import is_fingerprint

# Python attribute name -> wire field name.
_WIRE_NAMES: dict[str, str] = {
    "revision_id": "revisionId",
    "fingerprint": "fingerprint",
    "author": "author",
    "author_contact": "authorContact",
    "branch_name": "branchName",
    "message": "message",
    "timestamp": "timestamp",
    "submitter_identity": "submitterIdentity",
    "project_label": "projectLabel",
}

_REQUIRED: tuple[str, ...] = ("revision_id", "fingerprint")


@dataclass(frozen=True)
class AttestationRecord:
    """One registry entry. Never mutated once accepted.

    Attributes:
        revision_id: Full commit id. Primary key in the registry.
        fingerprint: Snapshot fingerprint, ``"sha256:<hex>"``.
        author: Commit author name.
        author_contact: Commit author email.
        branch_name: Branch the commit was made on (``"HEAD"`` if detached).
        message: Commit message.
        timestamp: Submission time, ISO-8601 UTC.
        submitter_identity: Who or what sent the record.
        project_label: Free-form project identifier from configuration.
    """

    revision_id: str
    fingerprint: str
    author: str = ""
    author_contact: str = ""
    branch_name: str = ""
    message: str = ""
    timestamp: str = ""
    submitter_identity: str = ""
    project_label: str = ""

    def to_payload(self) -> dict[str, str]:
        """Serialize to the registry submission payload."""
        return {_WIRE_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> AttestationRecord:
        """Deserialize a record returned by the registry.

        Accepts either camelCase wire names or snake_case attribute names.

        Raises:
            ValueError: If a required field is missing or the fingerprint is
                malformed.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Record must be an object, got {type(data).__name__}")
        values: dict[str, str] = {}
        for attr, wire in _WIRE_NAMES.items():
            value = data.get(wire, data.get(attr))
            if value is not None:
                values[attr] = str(value)
        missing = [wire for attr, wire in _WIRE_NAMES.items() if attr in _REQUIRED and not values.get(attr)]
        if missing:
            raise ValueError(f"Record is missing required field(s): {', '.join(missing)}")
        if not is_fingerprint(values["fingerprint"]):
            raise ValueError(f"Record has malformed fingerprint: {values['fingerprint']!r}")
        return cls(**values)
