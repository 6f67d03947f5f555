"""
Fault behavioral tests (codes, trigger, rendering).

Scope
- trigger() raises errors, emits warnings, or renders them in shell mode.
- __replace__ keeps the fault type and merges options.
- rich rendering of headers, hints, and docs (plain and fancy).
- Host hooks read from __main__ (__codes__, __docs__, __prog__).

Conventions
- Test method names follow CamelCase per project convention.
"""
import contextlib
import io
import unittest
from types import SimpleNamespace
from unittest import TestCase, mock

from rich.console import Console

from serialine import (
    EmptyInlineValueWarning,
    FaultCode,
    InvalidValueError,
    MissingScalarValueError,
    SerializerException,
    SerializerWarning,
    getdoc,
    trigger,
)


def render(fault, **options):
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(fault.__replace__(**options))
    return console.file.getvalue()


class TestFaultCode(TestCase):
    """Stable identifiers."""

    def testValues(self):
        self.assertEqual(FaultCode.MALFORMED_QUOTING, 11201)
        self.assertEqual(FaultCode.MISSING_SCALAR_VALUE, 11211)
        self.assertEqual(FaultCode.MISSING_REQUIRED_SPEC, 11221)
        self.assertEqual(FaultCode.UNKNOWN_VALUE_TYPE, 11231)
        self.assertEqual(FaultCode.INVALID_VALUE, 11232)
        self.assertEqual(FaultCode.EMPTY_INLINE_VALUE, 12211)

    def testNormalize(self):
        self.assertEqual(FaultCode.INVALID_VALUE.normalize(), "11232")

    def testNormalizeFromHost(self):
        main = SimpleNamespace(__codes__={FaultCode.INVALID_VALUE: "E-VALUE"})
        with mock.patch.dict("sys.modules", {"__main__": main}):
            self.assertEqual(FaultCode.INVALID_VALUE.normalize(), "E-VALUE")

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.INVALID_VALUE))
        main = SimpleNamespace(__docs__={FaultCode.INVALID_VALUE: "values must parse"})
        with mock.patch.dict("sys.modules", {"__main__": main}):
            self.assertEqual(getdoc(FaultCode.INVALID_VALUE), "values must parse")

    def testGetdocRejectsNonCodes(self):
        with self.assertRaises(TypeError):
            getdoc(11232)


class TestTrigger(TestCase):
    """Surfacing faults."""

    def testRaisesErrors(self):
        with self.assertRaises(InvalidValueError) as context:
            trigger(InvalidValueError("bad", code=FaultCode.INVALID_VALUE), token="x")
        self.assertEqual(str(context.exception), "bad")
        self.assertEqual(context.exception.options["token"], "x")
        self.assertIs(context.exception.code, FaultCode.INVALID_VALUE)

    def testWarns(self):
        with self.assertWarns(EmptyInlineValueWarning):
            trigger(EmptyInlineValueWarning("empty"))

    def testShellErrorExits(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            with self.assertRaises(SystemExit) as context:
                trigger(MissingScalarValueError("no value", code=FaultCode.MISSING_SCALAR_VALUE), shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("no value", stderr.getvalue())

    def testShellWarningPrints(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            trigger(EmptyInlineValueWarning("empty"), shell=True)
        self.assertIn("empty", stderr.getvalue())

    def testRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))

    def testReplaceKeepsType(self):
        fault = MissingScalarValueError("x", code=FaultCode.MISSING_SCALAR_VALUE)
        replaced = fault.__replace__(hint="h")
        self.assertIs(type(replaced), MissingScalarValueError)
        self.assertEqual(replaced.options["hint"], "h")
        self.assertIs(replaced.code, FaultCode.MISSING_SCALAR_VALUE)
        self.assertNotIn("hint", fault.options)

    def testOptionsReadOnly(self):
        fault = SerializerException("x")
        with self.assertRaises(TypeError):
            fault.options["code"] = 1

    def testHierarchy(self):
        self.assertTrue(issubclass(InvalidValueError, SerializerException))
        self.assertTrue(issubclass(EmptyInlineValueWarning, SerializerWarning))
        self.assertTrue(issubclass(SerializerWarning, Warning))


class TestRender(TestCase):
    """rich output."""

    def testPlain(self):
        fault = InvalidValueError(
            "cannot read int from ['x']",
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            hint="check the value",
            docs="values are converted per type",
        )
        output = render(fault, colorful=False)
        self.assertIn("serialine", output)
        self.assertIn("11232", output)
        self.assertIn("Invalid Value", output)
        self.assertIn("cannot read int from ['x']", output)
        self.assertIn("check the value", output)
        self.assertIn("values are converted per type", output)

    def testFancy(self):
        output = render(EmptyInlineValueWarning("empty", code=FaultCode.EMPTY_INLINE_VALUE), fancy=True)
        self.assertIn("12211", output)
        self.assertIn("empty", output)
        self.assertIn("╭", output)

    def testUnknownCodeAndTitle(self):
        output = render(SerializerException("plain"))
        self.assertIn("?", output)
        self.assertIn("Serializerexception", output)

    def testProgFromHost(self):
        main = SimpleNamespace(__prog__="copy", __styles__={})
        with mock.patch.dict("sys.modules", {"__main__": main}):
            output = render(SerializerException("plain"))
        self.assertIn("[ copy", output)


if __name__ == "__main__":
    unittest.main()
