from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

__all__ = [
    "ABSENT",
    "ItemId",
    "Item",
    "ExistingData",
    "SourceResult",
    "FileResult",
    "RunReport",
    "build_document",
    "dedup_key",
    "iso_timestamp",
    "utc_now",
]

ItemId = Union[int, str]

# Upstream record had no such key; dropped when serialized.
ABSENT: Any = object()


@dataclass(frozen=True, slots=True)
class Item:
    """Catalog entry as persisted; identity is `id`, `name` is descriptive."""

    id: ItemId
    name: Any = ABSENT

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Item":
        return cls(id=record.get("id"), name=record.get("name", ABSENT))

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {"id": self.id}
        if self.name is not ABSENT:
            record["name"] = self.name
        return record


def dedup_key(item_id: Any) -> Any:
    """Key used in the seen-id set.

    `True == 1` in Python, so booleans are tagged to keep them apart from
    numeric ids. `1` and `1.0` still collide, as they do in JSON numbers.
    """
    if isinstance(item_id, bool):
        return ("bool", item_id)
    return item_id


@dataclass(slots=True)
class ExistingData:
    """Records already on disk plus the dedup set seeded from them."""

    items: list[dict[str, Any]] = field(default_factory=list)
    ids: set[Any] = field(default_factory=set)


@dataclass(slots=True)
class SourceResult:
    items: list[Item] = field(default_factory=list)
    new_items: int = 0
    duplicates: int = 0
    pages: int = 0
    error: str | None = None


@dataclass(slots=True)
class FileResult:
    output_file: str
    success: bool
    total_items: int
    new_items: int
    duplicates: int


@dataclass(slots=True)
class RunReport:
    results: list[FileResult]
    duration_sec: float

    @property
    def all_success(self) -> bool:
        return all(r.success for r in self.results)


def build_document(
    items: list[dict[str, Any]], *, updated_at: datetime | None = None
) -> dict[str, Any]:
    return {
        "keyword": None,
        "totalItems": len(items),
        "lastUpdate": iso_timestamp(updated_at or utc_now()),
        "data": items,
    }


def iso_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a `Z` suffix."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
