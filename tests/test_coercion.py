from __future__ import annotations

import unittest

from ncloud_apigw.coercion import INT64_MAX, INT64_MIN, NULL_SCALAR, Scalar, coerce_scalar, scalar_attr
from ncloud_apigw.errors import TypeMismatchError, UnsupportedTypeError
from ncloud_apigw.models import BoolType, Float64Type, Int32Type, Int64Type, ScalarKind, StringType


class TestCoerceScalar(unittest.TestCase):
    def test_kinds(self) -> None:
        self.assertEqual(coerce_scalar("a"), Scalar(ScalarKind.STRING, "a"))
        self.assertEqual(coerce_scalar(3), Scalar(ScalarKind.INT64, 3))
        self.assertEqual(coerce_scalar(1.5), Scalar(ScalarKind.FLOAT64, 1.5))
        self.assertEqual(coerce_scalar(False), Scalar(ScalarKind.BOOL, False))

    def test_bool_is_not_int(self) -> None:
        self.assertIs(coerce_scalar(True).kind, ScalarKind.BOOL)

    def test_none_is_kindless_null(self) -> None:
        scalar = coerce_scalar(None)
        self.assertTrue(scalar.is_null)
        self.assertIsNone(scalar.kind)

    def test_unsupported_type(self) -> None:
        with self.assertRaises(UnsupportedTypeError) as ctx:
            coerce_scalar([1, 2])
        self.assertEqual(ctx.exception.type_name, "list")
        with self.assertRaises(UnsupportedTypeError) as ctx:
            coerce_scalar({"a": 1})
        self.assertEqual(ctx.exception.type_name, "dict")


class TestScalarAttr(unittest.TestCase):
    def test_exact_kinds(self) -> None:
        self.assertEqual(scalar_attr(Scalar(ScalarKind.STRING, "x"), ScalarKind.STRING).type, StringType)
        self.assertEqual(scalar_attr(Scalar(ScalarKind.BOOL, True), ScalarKind.BOOL).value, True)
        self.assertEqual(scalar_attr(Scalar(ScalarKind.FLOAT64, 0.5), ScalarKind.FLOAT64).type, Float64Type)

    def test_null_takes_declared_kind(self) -> None:
        for kind, attr_type in [
            (ScalarKind.BOOL, BoolType),
            (ScalarKind.INT32, Int32Type),
            (ScalarKind.INT64, Int64Type),
            (ScalarKind.STRING, StringType),
        ]:
            value = scalar_attr(NULL_SCALAR, kind)
            self.assertTrue(value.is_null())
            self.assertEqual(value.type, attr_type)

    def test_int32_range(self) -> None:
        value = scalar_attr(Scalar(ScalarKind.INT64, 5), ScalarKind.INT32)
        self.assertEqual(value.type, Int32Type)
        self.assertEqual(value.value, 5)
        with self.assertRaises(TypeMismatchError):
            scalar_attr(Scalar(ScalarKind.INT64, 2**40), ScalarKind.INT32)

    def test_int64_range(self) -> None:
        for number in (INT64_MIN, INT64_MAX):
            with self.subTest(number=number):
                self.assertEqual(scalar_attr(Scalar(ScalarKind.INT64, number), ScalarKind.INT64).value, number)
        for number in (INT64_MAX + 1, INT64_MIN - 1, 2**80):
            with self.subTest(number=number):
                with self.assertRaises(TypeMismatchError):
                    scalar_attr(Scalar(ScalarKind.INT64, number), ScalarKind.INT64, field="initial_count")
        with self.assertRaises(TypeMismatchError):
            scalar_attr(Scalar(ScalarKind.FLOAT64, 1e30), ScalarKind.INT64)

    def test_integral_float_narrows_to_int(self) -> None:
        value = scalar_attr(Scalar(ScalarKind.FLOAT64, 2.0), ScalarKind.INT64)
        self.assertEqual(value.value, 2)
        self.assertIsInstance(value.value, int)
        with self.assertRaises(TypeMismatchError):
            scalar_attr(Scalar(ScalarKind.FLOAT64, 2.5), ScalarKind.INT64)

    def test_int_widens_to_float(self) -> None:
        value = scalar_attr(Scalar(ScalarKind.INT64, 3), ScalarKind.FLOAT64)
        self.assertEqual(value.value, 3.0)
        self.assertIsInstance(value.value, float)

    def test_mismatch_names_field(self) -> None:
        with self.assertRaises(TypeMismatchError) as ctx:
            scalar_attr(Scalar(ScalarKind.STRING, "1"), ScalarKind.INT64, field="total")
        self.assertEqual(ctx.exception.field, "total")
        with self.assertRaises(TypeMismatchError):
            scalar_attr(Scalar(ScalarKind.BOOL, True), ScalarKind.INT64)
        with self.assertRaises(TypeMismatchError):
            scalar_attr(Scalar(ScalarKind.INT64, 1), ScalarKind.BOOL)


if __name__ == "__main__":
    unittest.main()
