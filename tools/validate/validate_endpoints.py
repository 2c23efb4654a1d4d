#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Iterable


class DependencyMissing(RuntimeError):
    pass


def _require_registry() -> Any:
    try:
        from ncloud_apigw import registry  # type: ignore
    except ImportError as exc:  # pragma: no cover
        raise DependencyMissing(
            "Missing dependency: ncloud_apigw. Install with: python -m pip install -e ."
        ) from exc
    return registry


def _iter_shape_refs(value: Any, path: str = "") -> Iterable[tuple[str, str]]:
    if isinstance(value, dict):
        if isinstance(value.get("shape"), str):
            yield path or "<root>", value["shape"]
        for key, child in value.items():
            child_path = f"{path}/{key}" if path else f"/{key}"
            yield from _iter_shape_refs(child, child_path)
    elif isinstance(value, list):
        for idx, child in enumerate(value):
            child_path = f"{path}/{idx}" if path else f"/{idx}"
            yield from _iter_shape_refs(child, child_path)


def _unused_shapes(table: dict[str, Any]) -> list[str]:
    shapes = table.get("shapes") or {}
    used = {ref for _, ref in _iter_shape_refs(table)}
    return sorted(name for name in shapes if name not in used)


def validate(path: Path) -> tuple[list[str], list[str]]:
    """Return (failures, warnings) for the endpoint table at `path`."""
    registry = _require_registry()
    failures: list[str] = []
    warnings: list[str] = []

    try:
        table = registry.load_table(path)
    except registry.DescriptorError as exc:
        return [str(exc)], warnings

    schema_errors = registry.validate_table(table)
    if schema_errors:
        return [f"schema: {e}" for e in schema_errors], warnings

    shapes = table.get("shapes") or {}
    for location, ref in _iter_shape_refs(table):
        if ref not in shapes:
            failures.append(f"unknown shape {ref!r} at {location}")
    if failures:
        return failures, warnings

    try:
        loaded = registry.EndpointRegistry.from_table(table)
    except registry.DescriptorError as exc:
        return [str(exc)], warnings

    for name in _unused_shapes(table):
        warnings.append(f"shape {name!r} is never referenced")
    # An explicit `body: []` marks a write that sends no body.
    declared_body = {entry["name"] for entry in table["endpoints"] if "body" in entry}
    for endpoint in loaded:
        if endpoint.method in {"POST", "PUT", "PATCH"} and not endpoint.body and endpoint.name not in declared_body:
            warnings.append(f"{endpoint.name}: {endpoint.method} without body fields")
    return failures, warnings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--path", help="Endpoint table to validate (default: packaged table)")
    parser.add_argument("--strict", action="store_true", help="Treat warnings as failures")
    args = parser.parse_args(argv)

    try:
        registry = _require_registry()
    except DependencyMissing as exc:
        print(str(exc), file=sys.stderr)
        return 2

    path = Path(args.path) if args.path else registry.DEFAULT_ENDPOINTS_PATH
    if not path.exists():
        print(f"Endpoint table not found: {path}", file=sys.stderr)
        return 2

    failures, warnings = validate(path)
    for line in warnings:
        print(f"warning: {line}", file=sys.stderr)
    if args.strict:
        failures = failures + warnings

    if failures:
        print("Endpoint table validation failed:", file=sys.stderr)
        for line in failures:
            print(f"- {line}", file=sys.stderr)
        return 1

    print(f"OK: {path} validated")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
