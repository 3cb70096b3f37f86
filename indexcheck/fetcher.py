"""State fetcher — retrieval of the observed index state of a project.

The verification pipeline depends only on the ``StateFetcher`` protocol, so a
live admin-API client, a captured snapshot, or a test double can stand in.
Every retrieval failure (network, auth, not found, bad payload) is reported as
a single ``StateFetchError``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Protocol

from indexcheck.errors import StateFetchError
from indexcheck.models import (
    ArrayContainment,
    BuildState,
    IndexField,
    ObservedIndexRecord,
    QueryScope,
    SortOrder,
)

logger = logging.getLogger(__name__)

# Admin API index states mapped onto BuildState
_STATE_MAP: dict[str, BuildState] = {
    "READY": BuildState.READY,
    "CREATING": BuildState.BUILDING,
    "BUILDING": BuildState.BUILDING,
    "NEEDS_REPAIR": BuildState.ERROR,
    "ERROR": BuildState.ERROR,
}

_PROJECT_RE = re.compile(r"^projects/([^/]+)/")


class StateFetcher(Protocol):
    """Anything that can list the deployed indexes of a project."""

    async def fetch_observed_indexes(self, project_id: str) -> list[ObservedIndexRecord]:
        ...


class SnapshotStateFetcher:
    """Serves observed state from a captured index listing on disk.

    The file holds either a bare list of index records or the admin API list
    response shape ``{"indexes": [...]}``.
    """

    def __init__(self, snapshot_path: str | Path):
        self.snapshot_path = Path(snapshot_path)

    async def fetch_observed_indexes(self, project_id: str) -> list[ObservedIndexRecord]:
        try:
            raw = await asyncio.to_thread(self.snapshot_path.read_text, encoding="utf-8")
        except OSError as e:
            raise StateFetchError(
                f"Cannot read index snapshot {self.snapshot_path}: {e.strerror or e}"
            ) from e

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StateFetchError(f"Index snapshot {self.snapshot_path} is not valid JSON: {e}") from e

        records = parse_observed_indexes(payload)
        for record in records:
            match = _PROJECT_RE.match(record.name)
            if match and match.group(1) != project_id:
                raise StateFetchError(
                    f"Index snapshot {self.snapshot_path} was captured for project "
                    f"'{match.group(1)}', not '{project_id}'"
                )

        logger.info("Loaded %d observed indexes from %s", len(records), self.snapshot_path)
        return records


class UnconfiguredStateFetcher:
    """Placeholder used when no observed-state source has been configured."""

    async def fetch_observed_indexes(self, project_id: str) -> list[ObservedIndexRecord]:
        raise StateFetchError(
            f"No observed index source configured for project '{project_id}'. "
            "Pass --snapshot or set INDEXCHECK_SNAPSHOT."
        )


async def fetch_with_timeout(
    fetcher: StateFetcher, project_id: str, timeout: float | None
) -> list[ObservedIndexRecord]:
    """Await a fetch, failing with ``StateFetchError`` once ``timeout`` seconds pass."""
    try:
        return await asyncio.wait_for(fetcher.fetch_observed_indexes(project_id), timeout)
    except asyncio.TimeoutError as e:
        raise StateFetchError(
            f"Timed out after {timeout:g}s fetching deployed indexes for '{project_id}'"
        ) from e


def parse_observed_indexes(payload) -> list[ObservedIndexRecord]:
    """Normalize raw index records into ``ObservedIndexRecord`` values."""
    if isinstance(payload, dict):
        payload = payload.get("indexes") or []
    if not isinstance(payload, list):
        raise StateFetchError(
            f"Expected a list of index records, got {type(payload).__name__}"
        )
    return [_record_from_raw(raw, i) for i, raw in enumerate(payload)]


def _record_from_raw(raw, position: int) -> ObservedIndexRecord:
    if not isinstance(raw, dict):
        raise StateFetchError(f"Index record {position} is not an object")

    raw_fields = raw.get("fields")
    if not isinstance(raw_fields, list) or not raw_fields:
        raise StateFetchError(
            f"Index record {position} is malformed: 'fields' must be a non-empty list"
        )

    try:
        scope = QueryScope(raw.get("queryScope") or QueryScope.COLLECTION.value)
        fields = tuple(_field_from_raw(f, i) for i, f in enumerate(raw_fields))
    except (TypeError, ValueError) as e:
        raise StateFetchError(f"Index record {position} is malformed: {e}") from e

    state = str(raw.get("state") or "")
    return ObservedIndexRecord(
        name=str(raw.get("name") or ""),
        query_scope=scope,
        fields=fields,
        build_state=_STATE_MAP.get(state.upper(), BuildState.UNKNOWN),
        collection_group=str(raw.get("collectionGroup") or ""),
    )


def _field_from_raw(raw, position: int) -> IndexField:
    if not isinstance(raw, dict):
        raise ValueError(f"field {position} is not an object")
    field_path = raw.get("fieldPath")
    if not isinstance(field_path, str) or not field_path:
        raise ValueError(f"field {position} has no string 'fieldPath'")

    order = raw.get("order")
    array_config = raw.get("arrayConfig")
    return IndexField(
        field_path=field_path,
        sort_order=SortOrder(order) if order else SortOrder.NONE,
        array_containment=ArrayContainment(array_config) if array_config else ArrayContainment.NONE,
    )
