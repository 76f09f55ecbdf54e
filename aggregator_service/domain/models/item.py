from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

ItemId = Union[str, int]


class _Unset:
    """Marker for a field that was not supplied in an update."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def id_key(item_id: ItemId) -> str:
    """Identity token for ids that may arrive as numbers or strings."""
    return str(item_id)


def is_valid_id(value: Any) -> bool:
    """Upstream ids are numbers or strings; booleans and nulls are rejected."""
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def _optional_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@dataclass
class Container:
    """Parent grouping returned by the first-level listing."""

    id: ItemId
    name: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Container":
        return cls(id=record["id"], name=_optional_text(record.get("name")))


@dataclass
class Item:
    """Domain model for a child record of a container."""

    id: ItemId
    name: Optional[str]
    container_id: ItemId
    container_name: Optional[str]
    description: Optional[str] = None
    price: Optional[Union[int, float]] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any], container: Container) -> "Item":
        """Builds an unenriched item tagged with its container."""
        return cls(
            id=record["id"],
            name=_optional_text(record.get("name")),
            container_id=container.id,
            container_name=container.name,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "containerId": self.container_id,
            "containerName": self.container_name,
            "description": self.description,
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        return cls(
            id=data["id"],
            name=data.get("name"),
            container_id=data.get("containerId"),
            container_name=data.get("containerName"),
            description=data.get("description"),
            price=data.get("price"),
        )


@dataclass
class ItemUpdate:
    """
    Partial update for every item sharing ``id``.

    ``description`` and ``price`` default to ``UNSET``. Any other value,
    including ``None``, ``0`` and ``""``, is written to the item.
    """

    id: ItemId
    description: Any = UNSET
    price: Any = UNSET

    def has_description(self) -> bool:
        return self.description is not UNSET

    def has_price(self) -> bool:
        return self.price is not UNSET


@dataclass
class AggregatedResult:
    """Flattened items of every container owned by a subject, in discovery order."""

    subject: str
    items: List[Item] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregatedResult":
        return cls(
            subject=str(data["subject"]),
            items=[Item.from_dict(item) for item in data.get("items", [])],
        )


@dataclass
class EnrichmentOutcome:
    """Counts reported after applying updates to a cached collection."""

    updated: int
    total: int
