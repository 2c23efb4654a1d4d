from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from .attributes import ObjectType, Value, object_value


@dataclass(frozen=True, slots=True)
class TypedResponse:
    """Materialized response of one endpoint call. Every declared field is present, possibly as a typed null."""

    endpoint: str
    type: ObjectType
    fields: Mapping[str, Value]

    def __getitem__(self, name: str) -> Value:
        return self.fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def null_fields(self) -> list[str]:
        return [name for name, value in self.fields.items() if value.is_null()]

    def to_native(self) -> Value:
        return object_value(self.type, self.fields)

    def to_dict(self) -> dict[str, Any]:
        return {name: value.to_python() for name, value in self.fields.items()}
