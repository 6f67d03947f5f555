"""
Value codec behavioral tests (Strategy and the default codecs).

Scope
- Lookup order: exact type, generic origin, enums, base classes, predicates.
- Conversion failures surface as InvalidValueError.
- Strategies are read-only and extended with `|`.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from decimal import Decimal
from enum import Enum, IntEnum
from pathlib import Path
from unittest import TestCase

from serialine import (
    BoolCodec,
    InvalidValueError,
    ScalarCodec,
    Strategy,
    UnknownValueTypeError,
    ValueCodec,
)


class Color(Enum):
    RED = 1
    GREEN = "g"


class Level(IntEnum):
    LOW = 1
    HIGH = 2


class Version:
    def __init__(self, text):
        self.parts = tuple(map(int, text.split(".")))


class TestScalars(TestCase):
    """Single-token conversions."""

    def setUp(self):
        self.strategy = Strategy()

    def testBuiltins(self):
        self.assertEqual(self.strategy.deserialize(str, ["a b"]), "a b")
        self.assertEqual(self.strategy.deserialize(int, ["42"]), 42)
        self.assertEqual(self.strategy.deserialize(float, ["1.5"]), 1.5)
        self.assertEqual(self.strategy.deserialize(Decimal, ["0.1"]), Decimal("0.1"))
        self.assertEqual(self.strategy.deserialize(Path, ["a/b"]), Path("a/b"))

    def testOptionalUnwrapped(self):
        self.assertEqual(self.strategy.deserialize(int | None, ["3"]), 3)

    def testInvalid(self):
        with self.assertRaises(InvalidValueError):
            self.strategy.deserialize(int, ["abc"])
        with self.assertRaises(InvalidValueError):
            self.strategy.deserialize(Decimal, ["abc"])

    def testExactlyOneToken(self):
        with self.assertRaises(InvalidValueError):
            self.strategy.deserialize(int, ["1", "2"])
        with self.assertRaises(InvalidValueError):
            self.strategy.deserialize(int, [])

    def testBool(self):
        for token in ("1", "true", "Yes", "ON"):
            with self.subTest(token=token):
                self.assertIs(self.strategy.deserialize(bool, [token]), True)
        for token in ("0", "false", "No", "off"):
            with self.subTest(token=token):
                self.assertIs(self.strategy.deserialize(bool, [token]), False)
        with self.assertRaises(InvalidValueError):
            self.strategy.deserialize(bool, ["maybe"])

    def testEnumByName(self):
        self.assertIs(self.strategy.deserialize(Color, ["RED"]), Color.RED)
        self.assertIs(self.strategy.deserialize(Color, ["green"]), Color.GREEN)

    def testEnumByValue(self):
        self.assertIs(self.strategy.deserialize(Color, ["g"]), Color.GREEN)
        self.assertIs(self.strategy.deserialize(Color, ["1"]), Color.RED)

    def testIntEnumUsesEnumCodec(self):
        self.assertIs(self.strategy.deserialize(Level, ["HIGH"]), Level.HIGH)
        self.assertIs(self.strategy.deserialize(Level, ["1"]), Level.LOW)

    def testEnumInvalid(self):
        with self.assertRaises(InvalidValueError) as context:
            self.strategy.deserialize(Color, ["BLUE"])
        self.assertIn("RED", context.exception.options["hint"])


class TestCollections(TestCase):
    """Multi-token conversions."""

    def setUp(self):
        self.strategy = Strategy()

    def testList(self):
        self.assertEqual(self.strategy.deserialize(list[int], ["1", "2"]), [1, 2])
        self.assertEqual(self.strategy.deserialize(list[int], []), [])

    def testBareList(self):
        self.assertEqual(self.strategy.deserialize(list, ["1", "2"]), ["1", "2"])

    def testSetAndFrozenset(self):
        self.assertEqual(self.strategy.deserialize(set[int], ["1", "1", "2"]), {1, 2})
        self.assertEqual(self.strategy.deserialize(frozenset[str], ["a"]), frozenset({"a"}))

    def testTuples(self):
        self.assertEqual(self.strategy.deserialize(tuple[int, ...], ["1", "2", "3"]), (1, 2, 3))
        self.assertEqual(self.strategy.deserialize(tuple[int, str], ["1", "a"]), (1, "a"))

    def testFixedTupleLength(self):
        with self.assertRaises(InvalidValueError):
            self.strategy.deserialize(tuple[int, str], ["1", "a", "b"])

    def testInvalidItem(self):
        with self.assertRaises(InvalidValueError):
            self.strategy.deserialize(list[int], ["1", "x"])

    def testNestedEnums(self):
        self.assertEqual(self.strategy.deserialize(list[Color], ["red", "g"]), [Color.RED, Color.GREEN])


class TestStrategy(TestCase):
    """Lookup table behavior."""

    def testUnknownType(self):
        with self.assertRaises(UnknownValueTypeError):
            Strategy().deserialize(Version, ["1.2"])

    def testSubclassResolvedThroughBases(self):
        class Name(str):
            pass

        value = Strategy().deserialize(Name, ["abc"])
        self.assertIsInstance(value, Name)
        self.assertEqual(value, "abc")

    def testExtend(self):
        base = Strategy()
        extended = base | {Version: ScalarCodec(Version)}
        self.assertEqual(extended.deserialize(Version, ["1.2"]).parts, (1, 2))
        self.assertNotIn(Version, base.codecs)
        self.assertIn(int, extended.codecs)

    def testOverride(self):
        strategy = Strategy() | {str: ScalarCodec(str.upper)}
        self.assertEqual(strategy.deserialize(str, ["ab"]), "AB")
        self.assertEqual(strategy.deserialize(list[str], ["a", "b"]), ["A", "B"])

    def testCustomCodec(self):
        class Pair(ValueCodec):
            def deserialize(self, strategy, type, tokens):
                return tuple(strategy.deserialize(int, [token]) for token in tokens[0].split(","))

        strategy = Strategy({tuple: Pair(), int: ScalarCodec()})
        self.assertEqual(strategy.deserialize(tuple, ["1,2"]), (1, 2))

    def testEmptyStrategy(self):
        with self.assertRaises(UnknownValueTypeError):
            Strategy({}).deserialize(str, ["a"])

    def testReadOnly(self):
        strategy = Strategy()
        with self.assertRaises(TypeError):
            strategy.codecs[Version] = ScalarCodec(Version)
        with self.assertRaises(AttributeError):
            strategy.codecs = {}

    def testRejectsNonCodecs(self):
        with self.assertRaises(TypeError):
            Strategy({int: int})
        with self.assertRaises(TypeError):
            Strategy(predicates=[("not callable", BoolCodec())])

    def testScalarCodecRejectsNonCallables(self):
        with self.assertRaises(TypeError):
            ScalarCodec("int")


class TestSerialize(TestCase):
    """Typed values back to raw tokens."""

    def setUp(self):
        self.strategy = Strategy()

    def testScalars(self):
        self.assertEqual(self.strategy.serialize(int, 5), ["5"])
        self.assertEqual(self.strategy.serialize(bool, True), ["true"])
        self.assertEqual(self.strategy.serialize(Color, Color.GREEN), ["GREEN"])
        self.assertEqual(self.strategy.serialize(Path, Path("a")), ["a"])

    def testCollections(self):
        self.assertEqual(self.strategy.serialize(list[int], [1, 2]), ["1", "2"])
        self.assertEqual(self.strategy.serialize(tuple[int, Color], (1, Color.RED)), ["1", "RED"])

    def testRoundTrip(self):
        for type, value in ((int, 7), (float, 0.25), (Color, Color.RED), (list[Level], [Level.HIGH])):
            with self.subTest(type=type):
                self.assertEqual(self.strategy.deserialize(type, self.strategy.serialize(type, value)), value)


if __name__ == "__main__":
    unittest.main()
