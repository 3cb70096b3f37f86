"""Tests for the verification pipeline with an injected state fetcher."""

import asyncio
import json

import pytest

from indexcheck.errors import ConfigurationError, SpecParseError, StateFetchError
from indexcheck.models import BuildState, IndexField, ObservedIndexRecord, QueryScope, SortOrder
from indexcheck.pipeline import IndexVerifier

SPEC = {
    "indexes": [
        {
            "collectionGroup": "migration-progress",
            "queryScope": "COLLECTION",
            "fields": [
                {"fieldPath": "status", "order": "ASCENDING"},
                {"fieldPath": "updatedAt", "order": "DESCENDING"},
            ],
        }
    ],
    "fieldOverrides": [],
}


class CannedFetcher:
    """Returns fixed records and remembers which project was asked for."""

    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.requested: list[str] = []

    async def fetch_observed_indexes(self, project_id):
        self.requested.append(project_id)
        if self.error:
            raise self.error
        return list(self.records)


def _migration_record(state=BuildState.READY) -> ObservedIndexRecord:
    return ObservedIndexRecord(
        name="projects/test-project-staging/databases/(default)/collectionGroups/migration-progress/indexes/a1",
        query_scope=QueryScope.COLLECTION,
        fields=(
            IndexField("status", SortOrder.ASCENDING),
            IndexField("updatedAt", SortOrder.DESCENDING),
        ),
        build_state=state,
    )


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / ".firebaserc").write_text(
        json.dumps({"projects": {"default": "test-project-default", "staging": "test-project-staging"}})
    )
    (tmp_path / "firestore.indexes.json").write_text(json.dumps(SPEC))
    return tmp_path


def _verify(workspace, fetcher, environment="staging", indexes="firestore.indexes.json"):
    verifier = IndexVerifier(fetcher, firebaserc_path=workspace / ".firebaserc")
    return asyncio.run(verifier.verify(environment, workspace / indexes))


def test_verify_passes(workspace):
    fetcher = CannedFetcher([_migration_record()])
    outcome = _verify(workspace, fetcher)
    assert outcome.passed
    assert outcome.project_id == "test-project-staging"
    assert fetcher.requested == ["test-project-staging"]
    assert len(outcome.result.satisfied) == 1


def test_verify_reports_not_ready(workspace):
    outcome = _verify(workspace, CannedFetcher([_migration_record(BuildState.BUILDING)]))
    assert not outcome.passed
    assert len(outcome.result.not_ready) == 1


def test_verify_reports_missing(workspace):
    outcome = _verify(workspace, CannedFetcher([]))
    assert [d.collection_group for d in outcome.result.missing] == ["migration-progress"]


def test_empty_spec_still_reports_unexpected(workspace):
    (workspace / "empty.json").write_text('{"indexes": [], "fieldOverrides": []}')
    outcome = _verify(workspace, CannedFetcher([_migration_record()]), indexes="empty.json")
    assert outcome.expected == []
    assert len(outcome.result.unexpected) == 1
    assert not outcome.passed


def test_configuration_error_before_fetch(workspace):
    fetcher = CannedFetcher([_migration_record()])
    with pytest.raises(ConfigurationError):
        _verify(workspace, fetcher, environment="production")
    assert fetcher.requested == []


def test_spec_error_before_fetch(workspace):
    (workspace / "broken.json").write_text('{"indexes": "not a list"}')
    fetcher = CannedFetcher([_migration_record()])
    with pytest.raises(SpecParseError):
        _verify(workspace, fetcher, indexes="broken.json")
    assert fetcher.requested == []


def test_fetch_error_propagates(workspace):
    with pytest.raises(StateFetchError):
        _verify(workspace, CannedFetcher(error=StateFetchError("permission denied")))
