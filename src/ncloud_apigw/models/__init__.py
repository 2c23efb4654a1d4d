from .attributes import (
    AttrType,
    BoolType,
    Float64Type,
    Int32Type,
    Int64Type,
    ListType,
    ObjectType,
    ScalarKind,
    ScalarType,
    StringType,
    Value,
    bool_value,
    float64_value,
    int32_value,
    int64_value,
    list_value,
    null,
    object_value,
    scalar_value,
    string_value,
)
from .descriptors import BodyField, Endpoint, ParamSpec, ResponseField
from .responses import TypedResponse

__all__ = [
    "AttrType",
    "ScalarKind",
    "ScalarType",
    "ObjectType",
    "ListType",
    "StringType",
    "Int32Type",
    "Int64Type",
    "Float64Type",
    "BoolType",
    "Value",
    "null",
    "scalar_value",
    "string_value",
    "int32_value",
    "int64_value",
    "float64_value",
    "bool_value",
    "object_value",
    "list_value",
    "ParamSpec",
    "BodyField",
    "ResponseField",
    "Endpoint",
    "TypedResponse",
]
