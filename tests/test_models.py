"""Tests for index data models."""

from indexcheck.models import (
    ArrayContainment,
    IndexDefinition,
    IndexField,
    QueryScope,
    ReconciliationResult,
    SortOrder,
)


def test_field_defaults_to_none():
    field = IndexField("status")
    assert field.sort_order == SortOrder.NONE
    assert field.array_containment == ArrayContainment.NONE


def test_field_to_dict_omits_none():
    assert IndexField("status").to_dict() == {"fieldPath": "status"}
    assert IndexField("tags", array_containment=ArrayContainment.CONTAINS).to_dict() == {
        "fieldPath": "tags",
        "arrayConfig": "CONTAINS",
    }


def test_describe():
    definition = IndexDefinition(
        collection_group="trades",
        query_scope=QueryScope.COLLECTION,
        fields=(
            IndexField("participants", array_containment=ArrayContainment.CONTAINS),
            IndexField("createdAt", SortOrder.DESCENDING),
        ),
    )
    assert definition.describe() == "participants CONTAINS, createdAt DESC"


def test_definitions_are_hashable_values():
    a = IndexDefinition("users", QueryScope.COLLECTION, (IndexField("name", SortOrder.ASCENDING),))
    b = IndexDefinition("users", QueryScope.COLLECTION, (IndexField("name", SortOrder.ASCENDING),))
    assert a == b
    assert len({a, b}) == 1


def test_result_passed_and_summary():
    result = ReconciliationResult()
    assert result.passed
    assert result.summary() == "[PASS] 0 satisfied, 0 missing, 0 not ready, 0 unexpected"

    result.missing.append(IndexDefinition("users", QueryScope.COLLECTION, (IndexField("name"),)))
    assert not result.passed
    assert result.summary().startswith("[FAIL]")
