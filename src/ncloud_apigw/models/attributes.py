from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Sequence


class ScalarKind(enum.Enum):
    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT64 = "float64"
    BOOL = "bool"


class AttrType:
    def is_object(self) -> bool:
        return isinstance(self, ObjectType)

    def is_list(self) -> bool:
        return isinstance(self, ListType)


@dataclass(frozen=True, slots=True)
class ScalarType(AttrType):
    kind: ScalarKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True, slots=True)
class ObjectType(AttrType):
    attr_types: Mapping[str, AttrType]

    def __hash__(self) -> int:
        return hash(frozenset(self.attr_types.items()))

    def __str__(self) -> str:
        inner = ", ".join(f"{k}: {v}" for k, v in self.attr_types.items())
        return f"object{{{inner}}}"


@dataclass(frozen=True, slots=True)
class ListType(AttrType):
    elem_type: AttrType

    def __str__(self) -> str:
        return f"list<{self.elem_type}>"


StringType = ScalarType(ScalarKind.STRING)
Int32Type = ScalarType(ScalarKind.INT32)
Int64Type = ScalarType(ScalarKind.INT64)
Float64Type = ScalarType(ScalarKind.FLOAT64)
BoolType = ScalarType(ScalarKind.BOOL)

SCALAR_TYPES: dict[ScalarKind, ScalarType] = {
    ScalarKind.STRING: StringType,
    ScalarKind.INT32: Int32Type,
    ScalarKind.INT64: Int64Type,
    ScalarKind.FLOAT64: Float64Type,
    ScalarKind.BOOL: BoolType,
}

_PY_TYPES: dict[ScalarKind, tuple[type, ...]] = {
    ScalarKind.STRING: (str,),
    ScalarKind.INT32: (int,),
    ScalarKind.INT64: (int,),
    ScalarKind.FLOAT64: (float,),
    ScalarKind.BOOL: (bool,),
}


@dataclass(frozen=True, slots=True)
class Value:
    """
    A value of the control-plane attribute system.

    Nulls keep their full type, so a null object or null list carries the same
    attribute-type tree as a present one and differs only in `null`.
    """

    type: AttrType
    value: Any = None
    null: bool = False

    def is_null(self) -> bool:
        return self.null

    def attributes(self) -> Mapping[str, "Value"]:
        if not isinstance(self.type, ObjectType):
            raise TypeError(f"{self.type} has no attributes")
        if self.null:
            return {}
        return self.value

    def elements(self) -> Sequence["Value"]:
        if not isinstance(self.type, ListType):
            raise TypeError(f"{self.type} has no elements")
        if self.null:
            return []
        return self.value

    def to_python(self) -> Any:
        if self.null:
            return None
        if isinstance(self.type, ObjectType):
            return {key: value.to_python() for key, value in self.value.items()}
        if isinstance(self.type, ListType):
            return [element.to_python() for element in self.value]
        return self.value

    def __str__(self) -> str:
        if self.null:
            return "<null>"
        return str(self.to_python())


def null(type_: AttrType) -> Value:
    return Value(type=type_, null=True)


def scalar_value(type_: ScalarType, value: Any) -> Value:
    expected = _PY_TYPES[type_.kind]
    if isinstance(value, bool) and type_.kind is not ScalarKind.BOOL:
        raise TypeError(f"bool is not a valid {type_} value")
    if not isinstance(value, expected):
        raise TypeError(f"{type(value).__name__} is not a valid {type_} value")
    return Value(type=type_, value=value)


def string_value(value: str) -> Value:
    return scalar_value(StringType, value)


def int32_value(value: int) -> Value:
    return scalar_value(Int32Type, value)


def int64_value(value: int) -> Value:
    return scalar_value(Int64Type, value)


def float64_value(value: float) -> Value:
    return scalar_value(Float64Type, value)


def bool_value(value: bool) -> Value:
    return scalar_value(BoolType, value)


def object_value(type_: ObjectType, attrs: Mapping[str, Value]) -> Value:
    missing = [name for name in type_.attr_types if name not in attrs]
    extra = [name for name in attrs if name not in type_.attr_types]
    if missing or extra:
        raise ValueError(f"attributes do not match {type_}: missing={missing} extra={extra}")
    for name, attr_type in type_.attr_types.items():
        if attrs[name].type != attr_type:
            raise ValueError(f"attribute {name} has type {attrs[name].type}, expected {attr_type}")
    return Value(type=type_, value={name: attrs[name] for name in type_.attr_types})


def list_value(type_: ListType, elements: Sequence[Value]) -> Value:
    for idx, element in enumerate(elements):
        if element.type != type_.elem_type:
            raise ValueError(f"element {idx} has type {element.type}, expected {type_.elem_type}")
    return Value(type=type_, value=list(elements))
