from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, cast

from .coercion import coerce_scalar, scalar_attr
from .errors import ApigwError, TypeMismatchError, UnsupportedTypeError
from .models.attributes import ListType, Value, list_value, null, object_value
from .models.descriptors import Endpoint, ResponseField
from .models.responses import TypedResponse

logger = logging.getLogger(__name__)

_BOUNDARY_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_BOUNDARY_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")


def camel_to_snake(key: str) -> str:
    key = _BOUNDARY_ACRONYM.sub(r"\1_\2", key)
    key = _BOUNDARY_LOWER_UPPER.sub(r"\1_\2", key)
    return key.lower()


def normalize_keys(raw: Any) -> Any:
    """Rewrite every mapping key in a decoded JSON tree to snake_case, including maps nested in lists."""
    if isinstance(raw, Mapping):
        return {camel_to_snake(str(key)): normalize_keys(value) for key, value in raw.items()}
    if isinstance(raw, list):
        return [normalize_keys(value) for value in raw]
    return raw


def filter_fields(raw: Mapping[str, Any], fields: Iterable[ResponseField]) -> dict[str, Any]:
    return {f.name: raw[f.name] for f in fields if f.name in raw}


def _child(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _type_name(value: Any) -> str:
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "list"
    return type(value).__name__


def _scalar(field_kind: Any, raw: Any, path: str) -> Value:
    try:
        scalar = coerce_scalar(raw)
    except UnsupportedTypeError as exc:
        raise TypeMismatchError(f"expected {field_kind.value}, got {_type_name(raw)}", field=path) from exc
    return scalar_attr(scalar, field_kind, field=path)


def _object(field: ResponseField, raw: Any, path: str) -> Value:
    if not isinstance(raw, Mapping):
        raise TypeMismatchError(f"expected object, got {_type_name(raw)}", field=path)
    attrs = materialize_fields(field.fields, filter_fields(raw, field.fields), path)
    return object_value(field.object_type(), attrs)


def _list(field: ResponseField, raw: Any, path: str) -> Value:
    list_type = cast(ListType, field.attr_type())
    if not isinstance(raw, list):
        raise TypeMismatchError(f"expected list, got {_type_name(raw)}", field=path)
    if not raw:
        return null(list_type)

    elements: list[Value] = []
    for idx, item in enumerate(raw):
        item_path = f"{path}[{idx}]"
        if field.items is not None:
            elements.append(_scalar(field.items, item, item_path))
        else:
            elements.append(_object(field, item, item_path))
    return list_value(list_type, elements)


def materialize_field(field: ResponseField, raw: Any, path: str = "") -> Value:
    path = path or field.name
    if raw is None:
        return null(field.attr_type())
    kind = field.scalar_kind
    if kind is not None:
        return _scalar(kind, raw, path)
    if field.is_object:
        return _object(field, raw, path)
    return _list(field, raw, path)


def materialize_fields(
    fields: Iterable[ResponseField],
    raw: Mapping[str, Any],
    path: str = "",
) -> dict[str, Value]:
    return {f.name: materialize_field(f, raw.get(f.name), _child(path, f.name)) for f in fields}


def materialize(endpoint: Endpoint, raw: Mapping[str, Any]) -> TypedResponse:
    """
    Convert a normalized response map into the endpoint's typed response.

    Undeclared keys are dropped at every level. Any field failure aborts the
    whole conversion; no partial response is returned.
    """

    if not isinstance(raw, Mapping):
        raise TypeMismatchError(f"expected object response, got {_type_name(raw)}", endpoint=endpoint.name)
    try:
        fields = materialize_fields(endpoint.response, filter_fields(raw, endpoint.response))
    except ApigwError as exc:
        raise exc.with_endpoint(endpoint.name)

    response = TypedResponse(endpoint=endpoint.name, type=endpoint.response_type(), fields=fields)
    logger.debug("materialized %s: %d fields, %d null", endpoint.name, len(fields), len(response.null_fields()))
    return response
