"""Tests for request/response schemas, mainly explicit field presence."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from aggregator_service.domain.models.item import UNSET, AggregatedResult
from aggregator_service.domain.schemas.items import (
    AggregatedResponse,
    EnrichmentRequest,
    ItemUpdateSchema,
)
from tests.conftest import make_item


def test_present_zero_price_is_carried():
    update = ItemUpdateSchema.model_validate({"id": 7, "price": 0}).to_domain()

    assert update.price == 0
    assert update.description is UNSET


def test_absent_fields_are_unset():
    update = ItemUpdateSchema.model_validate({"id": "7"}).to_domain()

    assert update.id == "7"
    assert update.price is UNSET
    assert update.description is UNSET


def test_explicit_null_is_carried():
    update = ItemUpdateSchema.model_validate({"id": 7, "description": None}).to_domain()

    assert update.description is None
    assert update.price is UNSET


def test_update_requires_id():
    with pytest.raises(ValidationError):
        EnrichmentRequest.model_validate({"updates": [{"price": 3}]})


def test_aggregated_response_uses_wire_names():
    result = AggregatedResult(subject="42", items=[make_item(1, description="d", price=0)])

    body = AggregatedResponse.from_result(result).model_dump()

    assert body == {
        "subject": "42",
        "items": [{
            "id": 1,
            "name": "Pass 1",
            "containerId": 10,
            "containerName": "Obby",
            "description": "d",
            "price": 0,
        }],
    }
