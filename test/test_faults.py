"""
Fault tests (messages, options, rendering, trigger).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering goes through a rich Console writing to a string buffer.
"""

from __future__ import annotations

import io
import types
import unittest
from unittest import TestCase, mock

from rich.console import Console

from toolbind import ToolModel, faults
from toolbind.faults import (
    FaultCode,
    InvalidValueError,
    MalformedKeyError,
    OptionWithoutArgumentError,
    TooFewValuesError,
    TooManyValuesError,
    UnrecognizedArgumentsError,
    trigger,
)


def render(fault):
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(fault)
    return console.file.getvalue()


class TestMessages(TestCase):
    """Messages and options of the binding faults."""

    def testInvalidOptionValue(self):
        fault = InvalidValueError("x", option="--count")
        self.assertEqual(str(fault), "invalid value 'x' for option '--count'")
        self.assertIs(fault.code, FaultCode.INVALID_OPTION_VALUE)
        self.assertFalse(fault.hint)

    def testInvalidArgumentValueWithAllowed(self):
        fault = InvalidValueError("x", argument="level", allowed=["b", "a"])
        self.assertEqual(str(fault), "invalid value 'x' for argument 'level'")
        self.assertIs(fault.code, FaultCode.INVALID_ARGUMENT_VALUE)
        self.assertEqual(fault.options["allowed"], ("a", "b"))
        self.assertEqual(fault.hint, "allowed values are a or b")

    def testMultiplicityMessages(self):
        self.assertEqual(
            str(TooFewValuesError(2, 1, argument="files")),
            "argument 'files' expects at least 2 values but got 1"
        )
        self.assertEqual(
            str(TooManyValuesError(1, 3, option="out")),
            "option '--out' expects at most 1 time but got 3"
        )

    def testOptionsAreReadOnly(self):
        fault = OptionWithoutArgumentError("--out")
        with self.assertRaises(TypeError):
            fault.options["option"] = "--in"  # type: ignore[index]

    def testMalformedKeyIsValueError(self):
        self.assertIsInstance(MalformedKeyError("x"), ValueError)


class TestRendering(TestCase):
    """rich rendering of faults."""

    def testPlainRendering(self):
        text = render(UnrecognizedArgumentsError(["--zap"]).__replace__(colorful=False))
        self.assertIn("toolbind", text)
        self.assertIn(str(FaultCode.UNRECOGNIZED_ARGUMENTS.value), text)
        self.assertIn("Unrecognized Arguments", text)
        self.assertIn("unrecognized arguments: --zap", text)
        self.assertIn("→", text)

    def testProgramNameFromTool(self):
        text = render(MalformedKeyError("x", tool=ToolModel("ceylon")))
        self.assertIn("ceylon", text)

    def testHostCodeOverride(self):
        main = types.SimpleNamespace(__codes__={FaultCode.MALFORMED_KEY: "E-KEY"})
        with mock.patch.dict("sys.modules", {"__main__": main}):
            text = render(MalformedKeyError("x"))
        self.assertIn("E-KEY", text)

    def testFancyRendering(self):
        text = render(MalformedKeyError("x", fancy=True, ratio=0.5))
        self.assertIn("invalid configuration key 'x'", text)


class TestTrigger(TestCase):
    """trigger() raises outside shell mode, prints and exits inside it."""

    def testRaisesWithMergedOptions(self):
        with self.assertRaises(MalformedKeyError) as context:
            trigger(MalformedKeyError("x"), hint="see the manual")
        self.assertEqual(context.exception.hint, "see the manual")
        self.assertEqual(context.exception.options["key"], "x")

    def testReplaceKeepsCause(self):
        cause = KeyError("x")
        fault = MalformedKeyError("x")
        fault.__cause__ = cause
        self.assertIs(fault.__replace__(shell=False).__cause__, cause)

    def testShellModeExits(self):
        buffer = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=buffer, width=120, color_system=None)):
            with self.assertRaises(SystemExit) as context:
                trigger(MalformedKeyError("x"), shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("invalid configuration key 'x'", buffer.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))


if __name__ == "__main__":
    unittest.main()
