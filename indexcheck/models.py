"""Core data models for index verification.

Covers: the closed enumerations used by index fields and deployed indexes,
expected index definitions, observed index records, and the reconciliation
result produced by comparing the two.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SortOrder(Enum):
    """Ordering of a field within an index."""

    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"
    NONE = "NONE"  # Field is not ordered (e.g. an array-contains field)


class ArrayContainment(Enum):
    """Array configuration of a field within an index."""

    CONTAINS = "CONTAINS"
    NONE = "NONE"


class QueryScope(Enum):
    """Whether an index serves one collection or every collection sharing its name."""

    COLLECTION = "COLLECTION"
    COLLECTION_GROUP = "COLLECTION_GROUP"


class BuildState(Enum):
    """Lifecycle state of a deployed index."""

    READY = "READY"
    BUILDING = "BUILDING"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"


_SHORT_ORDER = {
    SortOrder.ASCENDING: "ASC",
    SortOrder.DESCENDING: "DESC",
}


# --- Index shape ---


@dataclass(frozen=True)
class IndexField:
    """A single field of an index. Position within the parent index is significant."""

    field_path: str
    sort_order: SortOrder = SortOrder.NONE
    array_containment: ArrayContainment = ArrayContainment.NONE

    def describe(self) -> str:
        if self.array_containment is ArrayContainment.CONTAINS:
            return f"{self.field_path} CONTAINS"
        suffix = _SHORT_ORDER.get(self.sort_order)
        return f"{self.field_path} {suffix}" if suffix else self.field_path

    def to_dict(self) -> dict:
        data: dict = {"fieldPath": self.field_path}
        if self.sort_order is not SortOrder.NONE:
            data["order"] = self.sort_order.value
        if self.array_containment is not ArrayContainment.NONE:
            data["arrayConfig"] = self.array_containment.value
        return data


@dataclass(frozen=True)
class IndexDefinition:
    """An expected index, declared directly or expanded from a field override."""

    collection_group: str
    query_scope: QueryScope
    fields: tuple[IndexField, ...]

    def describe(self) -> str:
        return ", ".join(f.describe() for f in self.fields)

    def to_dict(self) -> dict:
        return {
            "collectionGroup": self.collection_group,
            "queryScope": self.query_scope.value,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass(frozen=True)
class ObservedIndexRecord:
    """An index as actually deployed in the backing store."""

    name: str  # Opaque identity from the store
    query_scope: QueryScope
    fields: tuple[IndexField, ...]
    build_state: BuildState = BuildState.UNKNOWN
    collection_group: str = ""  # Empty when only the identity name carries it

    def describe(self) -> str:
        return ", ".join(f.describe() for f in self.fields)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "collectionGroup": self.collection_group,
            "queryScope": self.query_scope.value,
            "fields": [f.to_dict() for f in self.fields],
            "state": self.build_state.value,
        }


# --- Reconciliation ---


@dataclass(frozen=True)
class NotReadyIndex:
    """An expected definition whose structural match is deployed but not serving."""

    expected: IndexDefinition
    observed: ObservedIndexRecord

    def to_dict(self) -> dict:
        return {"expected": self.expected.to_dict(), "observed": self.observed.to_dict()}


@dataclass
class ReconciliationResult:
    """Structural diff between expected definitions and observed records."""

    satisfied: list[IndexDefinition] = field(default_factory=list)
    missing: list[IndexDefinition] = field(default_factory=list)
    not_ready: list[NotReadyIndex] = field(default_factory=list)
    unexpected: list[ObservedIndexRecord] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.missing and not self.not_ready and not self.unexpected

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return (
            f"[{status}] {len(self.satisfied)} satisfied, {len(self.missing)} missing, "
            f"{len(self.not_ready)} not ready, {len(self.unexpected)} unexpected"
        )

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "satisfied": [d.to_dict() for d in self.satisfied],
            "missing": [d.to_dict() for d in self.missing],
            "notReady": [p.to_dict() for p in self.not_ready],
            "unexpected": [r.to_dict() for r in self.unexpected],
        }
