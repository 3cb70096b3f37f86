"""Reconciler — structural matching of expected definitions against deployed indexes.

Matching is positional: two indexes match only when they have the same number
of fields and agree on path, sort order and array configuration at every
position. Candidates are searched within the ``(collection group, query scope)``
bucket of the expected definition, and the first match claims the record.

Duplicate expected definitions are not deduplicated: the second copy can only
claim a second identical record, otherwise it is reported missing.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import replace

from indexcheck.models import (
    BuildState,
    IndexDefinition,
    IndexField,
    NotReadyIndex,
    ObservedIndexRecord,
    QueryScope,
    ReconciliationResult,
)

logger = logging.getLogger(__name__)

UNKNOWN_COLLECTION_GROUP = "unknown"

_COLLECTION_GROUP_RE = re.compile(r"(?:^|/)collectionGroups/([^/]+)/indexes(?:/|$)")

BucketKey = tuple[str | None, QueryScope]


def collection_group_from_name(name: str) -> str | None:
    """Extract the collection group from an index identity name.

    ``projects/p/databases/(default)/collectionGroups/users/indexes/abc`` yields
    ``users``. Names without that segment yield None.
    """
    match = _COLLECTION_GROUP_RE.search(name or "")
    return match.group(1) if match else None


def fields_match(expected: Iterable[IndexField], observed: Iterable[IndexField]) -> bool:
    """True when both field lists agree position by position."""
    expected = tuple(expected)
    observed = tuple(observed)
    if len(expected) != len(observed):
        return False
    return all(
        e.field_path == o.field_path
        and e.sort_order is o.sort_order
        and e.array_containment is o.array_containment
        for e, o in zip(expected, observed)
    )


def reconcile(
    expected: Iterable[IndexDefinition],
    observed: Iterable[ObservedIndexRecord],
) -> ReconciliationResult:
    """Classify every expected definition and every observed record.

    Each expected definition lands in exactly one of ``satisfied``,
    ``missing`` or ``not_ready``. Observed records not claimed by any
    definition are reported as ``unexpected`` in their original order.
    Inputs are not modified.
    """
    result = ReconciliationResult()
    buckets = _bucket_observed(observed)

    for definition in expected:
        bucket = buckets.get((definition.collection_group, definition.query_scope), [])

        match_at = next(
            (i for i, (_, record) in enumerate(bucket) if fields_match(definition.fields, record.fields)),
            None,
        )
        if match_at is None:
            result.missing.append(definition)
            continue

        _, record = bucket.pop(match_at)
        if record.build_state is BuildState.READY:
            result.satisfied.append(definition)
        else:
            result.not_ready.append(NotReadyIndex(expected=definition, observed=record))

    leftovers = sorted(
        (entry for bucket in buckets.values() for entry in bucket),
        key=lambda entry: entry[0],
    )
    result.unexpected.extend(record for _, record in leftovers)

    logger.debug("Reconciled: %s", result.summary())
    return result


def _bucket_observed(
    observed: Iterable[ObservedIndexRecord],
) -> dict[BucketKey, list[tuple[int, ObservedIndexRecord]]]:
    """Group records by (collection group, scope), remembering input position."""
    buckets: dict[BucketKey, list[tuple[int, ObservedIndexRecord]]] = {}
    for position, record in enumerate(observed):
        group = record.collection_group
        if not group:
            group = collection_group_from_name(record.name)
            record = replace(record, collection_group=group or UNKNOWN_COLLECTION_GROUP)
        # Unresolvable groups get a key no expected definition can produce
        key = (group, record.query_scope)
        buckets.setdefault(key, []).append((position, record))

    logger.debug(
        "Bucketed %d observed indexes into %d groups",
        sum(len(b) for b in buckets.values()),
        len(buckets),
    )
    return buckets
