"""
Argument parser registry tests (built-ins, dispatch by type, subtool resolution).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import enum
import pathlib
import unittest
from unittest import TestCase

from toolbind import (
    ArgumentParser,
    BOOLEAN,
    Delegate,
    INTEGER,
    ParserKind,
    STRING,
    ToolModel,
    forclass,
    forenum,
    fortool,
)


class Color(enum.Enum):
    red = 1
    dark_blue = 2


class Mode(enum.StrEnum):
    fast = "fast"
    safe = "safe"


class TestBuiltins(TestCase):
    """String, integer and boolean parsers."""

    def testStringIsIdentity(self):
        self.assertEqual(STRING.parse(" keep  spaces "), " keep  spaces ")

    def testIntegerAcceptsSign(self):
        self.assertEqual(INTEGER.parse("42"), 42)
        self.assertEqual(INTEGER.parse("-7"), -7)
        self.assertEqual(INTEGER.parse("+7"), 7)

    def testIntegerRejectsNonDecimal(self):
        for text in ("", "4.2", "0x10", "1_000", " 1", "ten"):
            with self.subTest(text=text), self.assertRaises(ValueError):
                INTEGER.parse(text)

    def testBooleanTrueSpellings(self):
        for text in ("1", "yes", "true"):
            with self.subTest(text=text):
                self.assertIs(BOOLEAN.parse(text), True)

    def testBooleanIsTotal(self):
        for text in ("", "0", "no", "false", "TRUE", "Yes", "on", "true ", "anything"):
            with self.subTest(text=text):
                self.assertIs(BOOLEAN.parse(text), False)


class TestEnumParser(TestCase):
    """Enumerated parsers."""

    def testLookupByName(self):
        parser = forenum(Color)
        self.assertIs(parser.parse("red"), Color.red)
        self.assertIs(parser.parse("dark-blue"), Color.dark_blue)

    def testUnknownNameRaisesValueError(self):
        with self.assertRaises(ValueError):
            forenum(Color).parse("green")

    def testLookupIsCaseSensitive(self):
        with self.assertRaises(ValueError):
            forenum(Color).parse("RED")

    def testPossibilitiesAreMemberNames(self):
        parser = forenum(Color)
        self.assertTrue(parser.enumerable)
        self.assertEqual(parser.possibilities, ("red", "dark_blue"))

    def testNonEnumRejected(self):
        with self.assertRaises(TypeError):
            forenum(int)


class TestDispatch(TestCase):
    """forclass() selects a parser once per value type."""

    def testBuiltinTypes(self):
        self.assertIs(forclass(str), STRING)
        self.assertIs(forclass(int), INTEGER)
        self.assertIs(forclass(bool), BOOLEAN)

    def testEnumsBeforeTheirMixins(self):
        self.assertIs(forclass(Mode).kind, ParserKind.ENUM)
        self.assertIs(forclass(Color).kind, ParserKind.ENUM)

    def testOtherClassesUseTheirConstructor(self):
        parser = forclass(pathlib.PurePosixPath)
        self.assertIs(parser.kind, ParserKind.CONSTRUCTOR)
        self.assertEqual(parser.parse("a/b"), pathlib.PurePosixPath("a/b"))
        self.assertFalse(parser.enumerable)

    def testNonClassesHaveNoParser(self):
        self.assertIsNone(forclass("str"))
        self.assertIsNone(forclass(len))

    def testToolModelNeedsLoader(self):
        self.assertIsNone(forclass(ToolModel))
        self.assertIs(forclass(ToolModel, loader={}).kind, ParserKind.TOOL)


class TestToolParser(TestCase):
    """Subtool resolution through mappings and callables."""

    def setUp(self):
        self.sub = ToolModel("sub", dict)

    def testMappingLoader(self):
        parser = fortool({"sub": self.sub})
        delegate = parser.parse("sub")
        self.assertIsInstance(delegate, Delegate)
        self.assertIs(delegate.model, self.sub)
        self.assertEqual(parser.possibilities, ("sub",))

    def testCallableLoader(self):
        parser = fortool(lambda name: self.sub if name == "sub" else None)
        self.assertIs(parser.parse("sub").model, self.sub)
        self.assertFalse(parser.enumerable)
        with self.assertRaises(ValueError):
            parser.parse("other")

    def testUnknownNameRaisesValueError(self):
        with self.assertRaises(ValueError):
            fortool({}).parse("sub")

    def testLoaderValidated(self):
        with self.assertRaises(TypeError):
            fortool("sub")

    def testResolvingDoesNotInstantiate(self):
        def factory():
            raise AssertionError("instantiated while parsing")

        sub = ToolModel("sub", factory)
        self.assertEqual(fortool({"sub": sub}).parse("sub"), Delegate(sub))

    def testCustomParserReceivesTool(self):
        seen = []
        parser = ArgumentParser(ParserKind.CONSTRUCTOR, lambda argument, tool: seen.append(tool) or argument)
        parser.parse("x", "the-tool")
        self.assertEqual(seen, ["the-tool"])


if __name__ == "__main__":
    unittest.main()
