from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from ..errors import DescriptorError
from .attributes import SCALAR_TYPES, AttrType, ListType, ObjectType, ScalarKind

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

SCALAR_KINDS = frozenset(kind.value for kind in ScalarKind)
BODY_KINDS = SCALAR_KINDS | {"json", "list", "object"}
RESPONSE_KINDS = SCALAR_KINDS | {"list", "object"}

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


def _omit_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True, slots=True)
class ParamSpec:
    name: str
    key: str
    kind: ScalarKind = ScalarKind.STRING
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "key": self.key,
            "kind": self.kind.value,
            "required": self.required,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ParamSpec":
        return ParamSpec(
            name=data["name"],
            key=data.get("key", data["name"]),
            kind=ScalarKind(data.get("kind", "string")),
            required=bool(data.get("required", False)),
        )


@dataclass(frozen=True, slots=True)
class BodyField:
    name: str
    key: str
    kind: str = "string"
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "key": self.key,
            "kind": self.kind,
            "required": self.required,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "BodyField":
        kind = data.get("kind", "string")
        if kind not in BODY_KINDS:
            raise DescriptorError(f"body field {data['name']}: unknown kind {kind!r}")
        return BodyField(
            name=data["name"],
            key=data.get("key", data["name"]),
            kind=kind,
            required=bool(data.get("required", False)),
        )


@dataclass(frozen=True, slots=True)
class ResponseField:
    name: str
    kind: str
    fields: tuple["ResponseField", ...] = ()
    items: ScalarKind | None = None

    @property
    def scalar_kind(self) -> ScalarKind | None:
        if self.kind in SCALAR_KINDS:
            return ScalarKind(self.kind)
        return None

    @property
    def is_object(self) -> bool:
        return self.kind == "object"

    @property
    def is_list(self) -> bool:
        return self.kind == "list"

    def object_type(self) -> ObjectType:
        return ObjectType({f.name: f.attr_type() for f in self.fields})

    def attr_type(self) -> AttrType:
        scalar = self.scalar_kind
        if scalar is not None:
            return SCALAR_TYPES[scalar]
        if self.is_object:
            return self.object_type()
        if self.items is not None:
            return ListType(SCALAR_TYPES[self.items])
        return ListType(self.object_type())

    def to_dict(self) -> dict[str, Any]:
        return _omit_none(
            {
                "name": self.name,
                "kind": self.kind,
                "fields": [f.to_dict() for f in self.fields] if self.fields else None,
                "items": self.items.value if self.items is not None else None,
            }
        )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ResponseField":
        name = data["name"]
        kind = data.get("kind", "string")
        if kind not in RESPONSE_KINDS:
            raise DescriptorError(f"response field {name}: unknown kind {kind!r}")
        fields = tuple(ResponseField.from_dict(f) for f in data.get("fields") or [])
        items = ScalarKind(data["items"]) if data.get("items") else None
        if kind == "object" and items is not None:
            raise DescriptorError(f"response field {name}: objects take fields, not items")
        if kind == "list" and fields and items is not None:
            raise DescriptorError(f"response field {name}: list declares both fields and items")
        if kind == "list" and not fields and items is None:
            raise DescriptorError(f"response field {name}: list declares neither fields nor items")
        if kind in SCALAR_KINDS and (fields or items is not None):
            raise DescriptorError(f"response field {name}: scalar fields cannot nest")
        return ResponseField(name=name, kind=kind, fields=fields, items=items)


@dataclass(frozen=True, slots=True)
class Endpoint:
    """
    Static definition of one REST operation.

    `path` is a template such as ``/products/{product-id}/apis``; every
    placeholder is bound by exactly one entry of `path_params` (matched on
    `ParamSpec.key`). Path parameters are always required.
    """

    name: str
    method: str
    path: str
    path_params: tuple[ParamSpec, ...] = ()
    query_params: tuple[ParamSpec, ...] = ()
    body: tuple[BodyField, ...] = ()
    response: tuple[ResponseField, ...] = ()
    description: str | None = None

    def placeholders(self) -> list[str]:
        return _PLACEHOLDER.findall(self.path)

    def request_fields(self) -> set[str]:
        names = {p.name for p in self.path_params}
        names.update(p.name for p in self.query_params)
        names.update(f.name for f in self.body)
        return names

    def response_type(self) -> ObjectType:
        return ObjectType({f.name: f.attr_type() for f in self.response})

    def to_dict(self) -> dict[str, Any]:
        return _omit_none(
            {
                "name": self.name,
                "description": self.description,
                "method": self.method,
                "path": self.path,
                "path_params": [p.to_dict() for p in self.path_params],
                "query_params": [p.to_dict() for p in self.query_params],
                "body": [f.to_dict() for f in self.body],
                "response": [f.to_dict() for f in self.response],
            }
        )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Endpoint":
        name = data["name"]
        method = str(data["method"]).upper()
        if method not in HTTP_METHODS:
            raise DescriptorError(f"endpoint {name}: unsupported method {method}")

        path_params = tuple(
            ParamSpec.from_dict({**p, "required": True}) for p in data.get("path_params") or []
        )
        endpoint = Endpoint(
            name=name,
            method=method,
            path=data["path"],
            path_params=path_params,
            query_params=tuple(ParamSpec.from_dict(p) for p in data.get("query_params") or []),
            body=tuple(BodyField.from_dict(f) for f in data.get("body") or []),
            response=tuple(ResponseField.from_dict(f) for f in data.get("response") or []),
            description=data.get("description"),
        )

        placeholders = endpoint.placeholders()
        declared = [p.key for p in path_params]
        if sorted(placeholders) != sorted(declared):
            raise DescriptorError(
                f"endpoint {name}: path placeholders {placeholders} do not match path params {declared}"
            )

        seen: set[str] = set()
        for field_name in (
            [p.name for p in endpoint.path_params]
            + [p.name for p in endpoint.query_params]
            + [f.name for f in endpoint.body]
        ):
            if field_name in seen:
                raise DescriptorError(f"endpoint {name}: duplicate request field {field_name}")
            seen.add(field_name)
        return endpoint
