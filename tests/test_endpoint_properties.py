from __future__ import annotations

import copy
import json
import unittest
from typing import Any

from ncloud_apigw.materialize import materialize, normalize_keys
from ncloud_apigw.models import ResponseField, ScalarKind, Value
from ncloud_apigw.registry import default_registry
from ncloud_apigw.request import build_request

_SCALARS: dict[ScalarKind, Any] = {
    ScalarKind.STRING: "s",
    ScalarKind.INT32: 7,
    ScalarKind.INT64: 7,
    ScalarKind.FLOAT64: 1.5,
    ScalarKind.BOOL: True,
}

_BODY_SAMPLES: dict[str, Any] = {
    "json": '{"a": 1}',
    "list": ["x"],
    "object": {"a": "b"},
}


def _request_sample(kind: Any) -> Any:
    if isinstance(kind, ScalarKind):
        return _SCALARS[kind]
    if kind in _BODY_SAMPLES:
        return _BODY_SAMPLES[kind]
    return _SCALARS[ScalarKind(kind)]


def _response_sample(field: ResponseField) -> Any:
    if field.scalar_kind is not None:
        return _SCALARS[field.scalar_kind]
    if field.is_object:
        return {f.name: _response_sample(f) for f in field.fields}
    if field.items is not None:
        return [_SCALARS[field.items]]
    return [{f.name: _response_sample(f) for f in field.fields}]


def _to_camel(raw: Any) -> Any:
    if isinstance(raw, dict):
        out = {}
        for key, value in raw.items():
            head, *rest = key.split("_")
            out[head + "".join(part.title() for part in rest)] = _to_camel(value)
        return out
    if isinstance(raw, list):
        return [_to_camel(v) for v in raw]
    return raw


def _list_paths(
    fields: tuple[ResponseField, ...],
    prefix: tuple[str, ...] = (),
    into_lists: bool = True,
) -> list[tuple[tuple[str, ...], ResponseField]]:
    """Every list field reachable through objects and, when `into_lists`, through first list elements."""
    paths = []
    for field in fields:
        path = prefix + (field.name,)
        if field.is_list:
            paths.append((path, field))
        if field.fields and (into_lists or not field.is_list):
            paths.extend(_list_paths(field.fields, path, into_lists))
    return paths


def _empty_lists(field: ResponseField) -> Any:
    if field.is_list:
        return []
    if field.is_object:
        return {f.name: _empty_lists(f) for f in field.fields}
    return _SCALARS[field.scalar_kind]


def _with_empty_list(raw: dict[str, Any], path: tuple[str, ...]) -> dict[str, Any]:
    raw = copy.deepcopy(raw)
    node: Any = raw
    for name in path[:-1]:
        node = node[name]
        if isinstance(node, list):
            node = node[0]
    node[path[-1]] = []
    return raw


def _value_at(response: Any, path: tuple[str, ...]) -> Value:
    value = response[path[0]]
    for name in path[1:]:
        if value.type.is_list():
            value = value.elements()[0]
        value = value.attributes()[name]
    return value


def _assert_fully_present(test: unittest.TestCase, value: Value, path: str) -> None:
    test.assertFalse(value.is_null(), path)
    if value.type.is_object():
        for name, child in value.attributes().items():
            _assert_fully_present(test, child, f"{path}.{name}")
    elif value.type.is_list():
        for idx, child in enumerate(value.elements()):
            _assert_fully_present(test, child, f"{path}[{idx}]")


class TestEveryEndpoint(unittest.TestCase):
    def test_required_only_request(self) -> None:
        for endpoint in default_registry():
            with self.subTest(endpoint=endpoint.name):
                request = {p.name: _request_sample(p.kind) for p in endpoint.path_params}
                request.update({p.name: _request_sample(p.kind) for p in endpoint.query_params if p.required})
                request.update({f.name: _request_sample(f.kind) for f in endpoint.body if f.required})
                prepared = build_request(endpoint, request)

                self.assertNotIn("{", prepared.path)
                self.assertEqual(
                    set(prepared.query),
                    {p.key for p in endpoint.query_params if p.required},
                )
                if endpoint.body:
                    body = json.loads(prepared.body)
                    self.assertEqual(list(body), [f.key for f in endpoint.body if f.required])
                else:
                    self.assertIsNone(prepared.body)

    def test_full_response_has_no_nulls(self) -> None:
        for endpoint in default_registry():
            with self.subTest(endpoint=endpoint.name):
                raw = {f.name: _response_sample(f) for f in endpoint.response}
                response = materialize(endpoint, raw)
                self.assertEqual(set(response), {f.name for f in endpoint.response})
                self.assertEqual(response.to_native().type, endpoint.response_type())
                for name in response:
                    _assert_fully_present(self, response[name], name)

    def test_missing_field_becomes_typed_null(self) -> None:
        for endpoint in default_registry():
            raw = {f.name: _response_sample(f) for f in endpoint.response}
            full = materialize(endpoint, raw)
            for field in endpoint.response:
                with self.subTest(endpoint=endpoint.name, field=field.name):
                    partial = materialize(endpoint, {k: v for k, v in raw.items() if k != field.name})
                    self.assertTrue(partial[field.name].is_null())
                    self.assertEqual(partial[field.name].type, field.attr_type())
                    for other in endpoint.response:
                        if other.name != field.name:
                            self.assertEqual(partial[other.name], full[other.name])

    def test_camel_case_wire_keys(self) -> None:
        for endpoint in default_registry():
            with self.subTest(endpoint=endpoint.name):
                raw = {f.name: _response_sample(f) for f in endpoint.response}
                wire = _to_camel(raw)
                self.assertEqual(
                    materialize(endpoint, normalize_keys(wire)).to_dict(),
                    materialize(endpoint, raw).to_dict(),
                )

    def test_every_list_emptied_at_once_becomes_typed_null(self) -> None:
        for endpoint in default_registry():
            raw = {f.name: _empty_lists(f) for f in endpoint.response}
            response = materialize(endpoint, raw)
            self.assertEqual(response.to_native().type, endpoint.response_type())
            for path, field in _list_paths(endpoint.response, into_lists=False):
                with self.subTest(endpoint=endpoint.name, field=".".join(path)):
                    value = _value_at(response, path)
                    self.assertTrue(value.is_null())
                    self.assertEqual(value.type, field.attr_type())

    def test_empty_list_at_every_depth_becomes_typed_null(self) -> None:
        for endpoint in default_registry():
            raw = {f.name: _response_sample(f) for f in endpoint.response}
            for path, field in _list_paths(endpoint.response):
                with self.subTest(endpoint=endpoint.name, field=".".join(path)):
                    response = materialize(endpoint, _with_empty_list(raw, path))
                    value = _value_at(response, path)
                    self.assertTrue(value.is_null())
                    self.assertEqual(value.type, field.attr_type())
                    self.assertEqual(response.to_native().type, endpoint.response_type())


if __name__ == "__main__":
    unittest.main()
