from __future__ import annotations

from dataclasses import dataclass

from .errors import TypeMismatchError, UnsupportedTypeError
from .models.attributes import SCALAR_TYPES, ScalarKind, Value, null, scalar_value

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

ScalarPy = str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Scalar:
    """A decoded JSON scalar tagged with its kind. `kind` is None for JSON null."""

    kind: ScalarKind | None
    value: ScalarPy = None

    @property
    def is_null(self) -> bool:
        return self.kind is None


NULL_SCALAR = Scalar(kind=None)


def coerce_scalar(raw: object) -> Scalar:
    # bool is a subclass of int, so it is checked first
    if raw is None:
        return NULL_SCALAR
    if isinstance(raw, bool):
        return Scalar(ScalarKind.BOOL, raw)
    if isinstance(raw, str):
        return Scalar(ScalarKind.STRING, raw)
    if isinstance(raw, int):
        return Scalar(ScalarKind.INT64, raw)
    if isinstance(raw, float):
        return Scalar(ScalarKind.FLOAT64, raw)
    raise UnsupportedTypeError(type(raw).__name__)


def _as_int(scalar: Scalar) -> int | None:
    if scalar.kind is ScalarKind.INT64:
        return int(scalar.value)  # type: ignore[arg-type]
    if scalar.kind is ScalarKind.FLOAT64 and float(scalar.value).is_integer():  # type: ignore[arg-type]
        return int(scalar.value)  # type: ignore[arg-type]
    return None


def scalar_attr(scalar: Scalar, declared: ScalarKind, *, field: str | None = None) -> Value:
    """
    Convert a tagged scalar into an attribute value of the declared kind.

    JSON null becomes a null of the declared kind. Numbers convert between the
    numeric kinds when no precision is lost; every other kind mismatch raises
    :class:`TypeMismatchError`.
    """

    attr_type = SCALAR_TYPES[declared]
    if scalar.is_null:
        return null(attr_type)

    if declared is scalar.kind and declared not in (ScalarKind.INT32, ScalarKind.INT64):
        return scalar_value(attr_type, scalar.value)

    if declared is ScalarKind.INT32:
        number = _as_int(scalar)
        if number is not None and INT32_MIN <= number <= INT32_MAX:
            return scalar_value(attr_type, number)
    elif declared is ScalarKind.INT64:
        number = _as_int(scalar)
        if number is not None and INT64_MIN <= number <= INT64_MAX:
            return scalar_value(attr_type, number)
    elif declared is ScalarKind.FLOAT64 and scalar.kind is ScalarKind.INT64:
        return scalar_value(attr_type, float(scalar.value))  # type: ignore[arg-type]

    got = scalar.kind.value if scalar.kind else "null"
    raise TypeMismatchError(f"expected {declared.value}, got {got} ({scalar.value!r})", field=field)
