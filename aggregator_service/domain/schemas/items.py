from typing import List, Optional, Union
from pydantic import BaseModel, Field

from aggregator_service.domain.models.item import AggregatedResult, EnrichmentOutcome, ItemUpdate


class ItemSchema(BaseModel):
    """Schema for a single aggregated item"""
    id: Union[int, str] = Field(..., description="Item identifier as reported upstream")
    name: Optional[str] = Field(None, description="Item name")
    containerId: Union[int, str, None] = Field(None, description="Identifier of the owning container")
    containerName: Optional[str] = Field(None, description="Name of the owning container")
    description: Optional[str] = Field(None, description="Description, once enriched")
    price: Union[int, float, None] = Field(None, description="Price, once enriched")


class AggregatedResponse(BaseModel):
    """Schema for the aggregated collection of a subject"""
    subject: str = Field(..., description="Subject the collection belongs to")
    items: List[ItemSchema] = Field(default_factory=list, description="Items in discovery order")

    @classmethod
    def from_result(cls, result: AggregatedResult) -> "AggregatedResponse":
        return cls(**result.to_dict())

    class Config:
        json_schema_extra = {
            "example": {
                "subject": "261",
                "items": [
                    {
                        "id": 1001,
                        "name": "VIP",
                        "containerId": 55,
                        "containerName": "Obby",
                        "description": None,
                        "price": None
                    }
                ]
            }
        }


class ItemUpdateSchema(BaseModel):
    """
    Schema for a partial item update.

    Only keys present in the request body are applied, so ``{"id": 7, "price": 0}``
    sets the price to zero while ``{"id": 7}`` leaves it untouched.
    """
    id: Union[int, str] = Field(..., description="Identifier of the item(s) to update")
    description: Optional[str] = Field(None, description="New description")
    price: Union[int, float, None] = Field(None, description="New price")

    def to_domain(self) -> ItemUpdate:
        update = ItemUpdate(id=self.id)
        if "description" in self.model_fields_set:
            update.description = self.description
        if "price" in self.model_fields_set:
            update.price = self.price
        return update


class EnrichmentRequest(BaseModel):
    """Schema for an enrichment request"""
    updates: List[ItemUpdateSchema] = Field(..., description="Partial updates to apply")

    class Config:
        json_schema_extra = {
            "example": {
                "updates": [
                    {"id": 1001, "description": "Skip the queue", "price": 0},
                    {"id": 1002, "description": ""}
                ]
            }
        }


class EnrichmentResponse(BaseModel):
    """Schema for the outcome of an enrichment"""
    ok: bool = Field(True, description="Whether the updates were applied")
    updated: int = Field(..., description="Number of updates that matched an item")
    total: int = Field(..., description="Number of items in the cached collection")

    @classmethod
    def from_outcome(cls, outcome: EnrichmentOutcome) -> "EnrichmentResponse":
        return cls(ok=True, updated=outcome.updated, total=outcome.total)


class InvalidationResponse(BaseModel):
    """Schema for a cache invalidation"""
    ok: bool = True
    invalidated: bool = Field(..., description="Whether an entry existed and was removed")
