from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence

from jsonschema import Draft202012Validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import DescriptorError, UnknownEndpointError
from .models.descriptors import Endpoint

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_ENDPOINTS_PATH = DATA_DIR / "endpoints.yaml"
SCHEMA_PATH = DATA_DIR / "endpoints.schema.json"


def _to_builtin(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _to_builtin(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_to_builtin(v) for v in value]
    return value


def load_table(path: Path) -> dict[str, Any]:
    yaml = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as file:
            data = yaml.load(file)
    except OSError as exc:
        raise DescriptorError(f"cannot read endpoint table {path}: {exc}") from exc
    except YAMLError as exc:
        raise DescriptorError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise DescriptorError(f"endpoint table {path} must be a mapping")
    return _to_builtin(data)


@functools.lru_cache(maxsize=None)
def _load_schema() -> dict[str, Any]:
    with SCHEMA_PATH.open("r", encoding="utf-8") as file:
        return json.load(file)


def _json_path(parts: Iterable[Any]) -> str:
    out = "$"
    for part in parts:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}"
    return out


def validate_table(table: Any) -> list[str]:
    validator = Draft202012Validator(_load_schema())
    errors = sorted(validator.iter_errors(table), key=lambda e: list(e.absolute_path))
    return [f"{_json_path(e.absolute_path)}: {e.message}" for e in errors]


def _resolve_fields(
    fields: list[dict[str, Any]],
    shapes: Mapping[str, list[dict[str, Any]]],
    trail: tuple[str, ...] = (),
) -> list[dict[str, Any]]:
    resolved: list[dict[str, Any]] = []
    for field in fields:
        field = dict(field)
        shape = field.pop("shape", None)
        if shape is not None:
            if shape not in shapes:
                raise DescriptorError(f"field {field.get('name')}: unknown shape {shape!r}")
            if shape in trail:
                raise DescriptorError(f"shape {shape!r} refers to itself: {' -> '.join(trail + (shape,))}")
            field["fields"] = _resolve_fields(shapes[shape], shapes, trail + (shape,))
        elif field.get("fields"):
            field["fields"] = _resolve_fields(field["fields"], shapes, trail)
        resolved.append(field)
    return resolved


class EndpointRegistry:
    """Immutable table of endpoint descriptors, keyed by endpoint name."""

    def __init__(self, endpoints: Iterable[Endpoint]) -> None:
        by_name: dict[str, Endpoint] = {}
        for endpoint in endpoints:
            if endpoint.name in by_name:
                raise DescriptorError(f"duplicate endpoint name: {endpoint.name}")
            by_name[endpoint.name] = endpoint
        self._endpoints = by_name

    @classmethod
    def from_table(cls, table: Mapping[str, Any]) -> "EndpointRegistry":
        errors = validate_table(table)
        if errors:
            raise DescriptorError("endpoint table failed schema validation", errors=errors)

        shapes = table.get("shapes") or {}
        endpoints: list[Endpoint] = []
        for raw in table["endpoints"]:
            data = dict(raw)
            data["response"] = _resolve_fields(data.get("response") or [], shapes)
            endpoints.append(Endpoint.from_dict(data))
        return cls(endpoints)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "EndpointRegistry":
        path = Path(path) if path is not None else DEFAULT_ENDPOINTS_PATH
        registry = cls.from_table(load_table(path))
        logger.info("loaded %d endpoints from %s", len(registry), path)
        return registry

    def get(self, name: str) -> Endpoint:
        try:
            return self._endpoints[name]
        except KeyError:
            raise UnknownEndpointError(name) from None

    def names(self) -> list[str]:
        return sorted(self._endpoints)

    def __contains__(self, name: object) -> bool:
        return name in self._endpoints

    def __iter__(self) -> Iterator[Endpoint]:
        return iter(self._endpoints.values())

    def __len__(self) -> int:
        return len(self._endpoints)


@functools.lru_cache(maxsize=1)
def default_registry() -> EndpointRegistry:
    return EndpointRegistry.load()
