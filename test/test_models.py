"""
Tool model behavioral tests (builder rules, parser selection, introspection).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import pathlib
import unittest
from unittest import TestCase

from toolbind import (
    ArgumentModel,
    ArgumentType,
    OptionModel,
    ParserKind,
    SubtoolModel,
    ToolModel,
    ONE,
    ONE_OR_MORE,
    ZERO_OR_ONE,
)


class TestOptionModel(TestCase):
    """OptionModel construction and defaults."""

    def testBoolDefaultsToFlag(self):
        option = OptionModel("verbose", "v", type=bool)
        self.assertIs(option.argtype, ArgumentType.NOT_ALLOWED)
        self.assertIs(option.argument.parser.kind, ParserKind.BOOLEAN)

    def testValueDefaultsToRequired(self):
        option = OptionModel("out")
        self.assertIs(option.argtype, ArgumentType.REQUIRED)
        self.assertEqual(option.argument.multiplicity, ZERO_OR_ONE)

    def testArgumentBackReference(self):
        option = OptionModel("out")
        self.assertIs(option.argument.option, option)
        self.assertEqual(option.argument.name, "out")

    def testShortNameMustBeOneCharacter(self):
        with self.assertRaises(ValueError):
            OptionModel("out", "ou")
        with self.assertRaises(ValueError):
            OptionModel("out", "-")

    def testLongNameValidated(self):
        with self.assertRaises(ValueError):
            OptionModel("--out")
        with self.assertRaises(ValueError):
            OptionModel("a=b")
        with self.assertRaises(TypeError):
            OptionModel(3)

    def testArgtypeMustBeEnum(self):
        with self.assertRaises(TypeError):
            OptionModel("out", argtype="required")

    def testUnsupportedTypeRejected(self):
        with self.assertRaises(TypeError):
            OptionModel("out", type="not a class")


class TestArgumentModel(TestCase):
    """ArgumentModel construction."""

    def testNargsSpellings(self):
        self.assertEqual(ArgumentModel("files", multiplicity="+").multiplicity, ONE_OR_MORE)
        self.assertEqual(ArgumentModel("file").multiplicity, ONE)

    def testMultivalued(self):
        self.assertTrue(ArgumentModel("files", multiplicity="*").multivalued)
        self.assertFalse(ArgumentModel("file", multiplicity="?").multivalued)

    def testConstructorParser(self):
        argument = ArgumentModel("path", type=pathlib.Path)
        self.assertIs(argument.parser.kind, ParserKind.CONSTRUCTOR)
        self.assertEqual(argument.parser.parse("a/b"), pathlib.Path("a/b"))

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            ArgumentModel("  ")

    def testInvalidSetterRejected(self):
        with self.assertRaises(TypeError):
            ArgumentModel("file", setter="not an identifier")


class TestToolModel(TestCase):
    """ToolModel builder rules and navigation."""

    def testDuplicateLongNameRejected(self):
        model = ToolModel()
        model.add_option("out", "o")
        with self.assertRaises(ValueError):
            model.add_option("out")

    def testDuplicateShortNameRejected(self):
        model = ToolModel()
        model.add_option("out", "o")
        with self.assertRaises(ValueError):
            model.add_option("other", "o")

    def testLookups(self):
        model = ToolModel()
        option = model.add_option("out", "o")
        self.assertIs(model.option("out"), option)
        self.assertIs(model.shortoption("o"), option)
        self.assertIsNone(model.option("o"))
        self.assertIs(option.tool, model)
        self.assertIs(option.argument.tool, model)

    def testOptionsKeepDeclarationOrder(self):
        model = ToolModel()
        for name in ("zeta", "alpha", "mid"):
            model.add_option(name)
        self.assertEqual(list(model.options), ["zeta", "alpha", "mid"])

    def testViewsAreCopies(self):
        model = ToolModel()
        model.add_argument("file")
        model.arguments.clear()
        model.options["x"] = None
        self.assertEqual(len(model.arguments), 1)
        self.assertNotIn("x", model.options)

    def testArgumentAfterVariableMultiplicityRejected(self):
        model = ToolModel()
        model.add_argument("files", multiplicity="*")
        with self.assertRaises(ValueError):
            model.add_argument("target")
        with self.assertRaises(ValueError):
            model.set_subtool({})

    def testArgumentAfterOptionalRejected(self):
        model = ToolModel()
        model.add_argument("file", multiplicity="?")
        with self.assertRaises(ValueError):
            model.add_argument("target")

    def testFixedMultiplicityAllowsFollowers(self):
        model = ToolModel()
        model.add_argument("pair", multiplicity=2)
        model.add_argument("target")
        self.assertEqual([argument.name for argument in model.arguments], ["pair", "target"])

    def testSubtoolIsLastSlot(self):
        model = ToolModel()
        first = model.add_argument("first")
        subtool = model.set_subtool({})
        self.assertIsInstance(subtool, SubtoolModel)
        self.assertEqual(model.arguments_and_subtool(), [first, subtool])
        self.assertIs(subtool.tool, model)
        with self.assertRaises(ValueError):
            model.add_argument("late")
        with self.assertRaises(ValueError):
            model.set_subtool({})

    def testSubtoolKeepsItsLoader(self):
        sub = ToolModel("sub")
        loader = {"sub": sub}
        subtool = ToolModel().set_subtool(loader, setter="command")
        self.assertEqual(subtool.loader, loader)
        self.assertIs(subtool.parser.kind, ParserKind.TOOL)
        self.assertEqual(subtool.parser.possibilities, ("sub",))
        self.assertIs(subtool.parser.parse("sub").model, sub)

    def testSubtoolModelRejectedAsArgument(self):
        with self.assertRaises(ValueError):
            ToolModel().add_argument(SubtoolModel({}))

    def testModelInstancesAccepted(self):
        model = ToolModel()
        option = model.add_option(OptionModel("out"))
        argument = model.add_argument(ArgumentModel("file"))
        self.assertIs(model.option("out"), option)
        self.assertIs(model.arguments[0], argument)
        with self.assertRaises(ValueError):
            ToolModel().add_option(option)

    def testNavigation(self):
        top = ToolModel()
        middle = ToolModel("config", parent=top)
        leaf = ToolModel("get", parent=middle)
        self.assertTrue(top.istoplevel)
        self.assertFalse(leaf.istoplevel)
        self.assertIs(leaf.root, top)
        self.assertEqual(leaf.path, ["config", "get"])
        self.assertEqual(top.path, [])

    def testFactoryProducesFreshInstances(self):
        model = ToolModel("", dict)
        self.assertIsNot(model.instantiate(), model.instantiate())

    def testCallbacksMustBeCallable(self):
        model = ToolModel()
        with self.assertRaises(TypeError):
            model.set_rest("rest")
        with self.assertRaises(TypeError):
            model.add_hook(None)

    def testReprHasNoBackReferenceCycle(self):
        model = ToolModel("compile")
        model.add_option("out", "o")
        model.set_subtool({})
        text = repr(model)
        self.assertTrue(text.startswith("tool-model(name='compile'"))
        self.assertIn("option-model(longname='out'", text)

    def testRichRepr(self):
        model = ToolModel("compile")
        self.assertEqual(dict(model.__rich_repr__())["name"], "compile")


if __name__ == "__main__":
    unittest.main()
