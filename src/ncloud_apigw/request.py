from __future__ import annotations

import dataclasses
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote

from .errors import SerializationError, ValidationError
from .models.descriptors import BodyField, Endpoint, ParamSpec

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")

Request = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class RawJSON:
    """Pre-serialized JSON carried by a request field and spliced into the body as a structured value."""

    text: str

    def decode(self, *, field: str | None = None) -> Any:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"invalid embedded JSON: {exc}", field=field) from exc


@dataclass(frozen=True, slots=True)
class PreparedRequest:
    method: str
    path: str
    query: dict[str, str]
    body: str | None = None


def _as_mapping(request: Any) -> Mapping[str, Any]:
    if request is None:
        return {}
    if isinstance(request, Mapping):
        return request
    if dataclasses.is_dataclass(request) and not isinstance(request, type):
        return {f.name: getattr(request, f.name) for f in dataclasses.fields(request)}
    raise ValidationError(f"request must be a mapping or dataclass instance, got {type(request).__name__}")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
        return True
    return False


def _check_unknown(endpoint: Endpoint, request: Mapping[str, Any]) -> None:
    unknown = sorted(set(request) - endpoint.request_fields())
    if unknown:
        raise ValidationError(f"unknown request fields: {', '.join(unknown)}", endpoint=endpoint.name)


def _normalize_segment(value: Any) -> str:
    text = _stringify(value)
    return text.replace("\\", "").replace('"', "")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, RawJSON):
        return value.text
    if isinstance(value, (int, float)):
        return str(value)
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"cannot encode {type(value).__name__}: {exc}") from exc


def build_path(endpoint: Endpoint, request: Any) -> str:
    values = _as_mapping(request)
    by_key: dict[str, ParamSpec] = {p.key: p for p in endpoint.path_params}

    def _substitute(match: re.Match[str]) -> str:
        param = by_key[match.group(1)]
        value = values.get(param.name)
        if _is_empty(value):
            raise ValidationError("required path parameter is missing", endpoint=endpoint.name, field=param.name)
        segment = _normalize_segment(value)
        if not segment:
            raise ValidationError("path parameter is empty after normalization", endpoint=endpoint.name, field=param.name)
        return quote(segment, safe="")

    return _PLACEHOLDER.sub(_substitute, endpoint.path)


def build_query(endpoint: Endpoint, request: Any) -> dict[str, str]:
    values = _as_mapping(request)
    query: dict[str, str] = {}
    for param in endpoint.query_params:
        value = values.get(param.name)
        if _is_empty(value):
            if param.required:
                raise ValidationError("required query parameter is missing", endpoint=endpoint.name, field=param.name)
            continue
        try:
            query[param.key] = _stringify(value)
        except SerializationError as exc:
            exc.field = param.name
            raise exc.with_endpoint(endpoint.name)
    return query


def _encode_body_value(field: BodyField, value: Any) -> Any:
    if isinstance(value, RawJSON):
        return value.decode(field=field.name)
    if field.kind == "json" and isinstance(value, str):
        return RawJSON(value).decode(field=field.name)
    return value


def build_body(endpoint: Endpoint, request: Any) -> str | None:
    if not endpoint.body:
        return None

    values = _as_mapping(request)
    body: dict[str, Any] = {}
    for field in endpoint.body:
        value = values.get(field.name)
        if _is_empty(value):
            if field.required:
                raise ValidationError("required body field is missing", endpoint=endpoint.name, field=field.name)
            continue
        try:
            body[field.key] = _encode_body_value(field, value)
        except SerializationError as exc:
            raise exc.with_endpoint(endpoint.name)

    try:
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"cannot encode request body: {exc}", endpoint=endpoint.name) from exc


def build_request(endpoint: Endpoint, request: Any) -> PreparedRequest:
    values = _as_mapping(request)
    _check_unknown(endpoint, values)
    prepared = PreparedRequest(
        method=endpoint.method,
        path=build_path(endpoint, values),
        query=build_query(endpoint, values),
        body=build_body(endpoint, values),
    )
    logger.debug("built %s %s query=%s", prepared.method, prepared.path, sorted(prepared.query))
    return prepared
