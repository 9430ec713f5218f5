"""
Schema specification behavioral tests.

Scope
- Validate Option, Subcommand and Cardinal construction, normalization and rejection rules.
- Validate immutability (detached views, copy.replace re-validation) and representation.
- Validate schema value conversion (to_option, to_slots).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from vexil import Option, Subcommand, Cardinal, SUBCOMMANDS, TAIL
from vexil.specs import respell_fields, respell_schema, to_option, to_slots
from vexil.utils import Unset


class TestOption(TestCase):
    """Behavioral tests for Option specifications."""

    def testDefaults(self):
        o = Option("number")
        self.assertEqual(o.name, "number")
        self.assertIs(o.type, Unset)
        self.assertEqual(o.alias, ())
        self.assertFalse(o.required)
        self.assertIs(o.default, Unset)
        self.assertIsNone(o.descr)
        self.assertIsNone(o.metavar)
        self.assertFalse(o.hidden)

    def testUnnamed(self):
        self.assertIs(Option().name, Unset)
        self.assertEqual(Option(alias="n").aliases, ("n",))

    def testAliasStringNormalized(self):
        o = Option("number", type="number", alias="n")
        self.assertEqual(o.alias, ("n",))
        self.assertEqual(o.aliases, ("number", "n"))

    def testAliasIterableNormalized(self):
        o = Option("number", alias=["n", "num"])
        self.assertEqual(o.alias, ("n", "num"))

    def testAliasDuplicatesRejected(self):
        with self.assertRaises(ValueError):
            Option("number", alias=["n", "n"])
        with self.assertRaises(ValueError):
            Option("number", alias=["number"])

    def testMalformedWordsRejected(self):
        for alias in ("-n", "a b", "x=y", ""):
            with self.subTest(alias=alias):
                with self.assertRaises(ValueError):
                    Option("number", alias=alias)
        with self.assertRaises(ValueError):
            Option("--number")

    def testAliasTypeRejected(self):
        with self.assertRaises(TypeError):
            Option("number", alias=5)
        with self.assertRaises(TypeError):
            Option("number", alias=[5])

    def testTypeValidation(self):
        with self.assertRaises(ValueError):
            Option("number", type="  ")
        with self.assertRaises(TypeError):
            Option("number", type=int)

    def testCallablesValidation(self):
        with self.assertRaises(TypeError):
            Option("number", transform="upper")
        with self.assertRaises(TypeError):
            Option("number", test=True)

    def testDescrAndMetavarTrimmed(self):
        o = Option("number", descr="  a number  ", metavar=" n ")
        self.assertEqual(o.descr, "a number")
        self.assertEqual(o.metavar, "n")
        with self.assertRaises(ValueError):
            Option("number", descr="   ")
        with self.assertRaises(TypeError):
            Option("number", metavar=3)

    def testDefaultViewIsDetached(self):
        o = Option("tags", default=["a"])
        o.default.append("b")
        self.assertEqual(o.default, ["a"])

    def testFieldsAreReadOnly(self):
        with self.assertRaises(AttributeError):
            Option("number").required = True  # type: ignore[misc]

    def testReplaceRebuilds(self):
        o = Option("number", type="number", alias="n")
        other = copy.replace(o, name="count")
        self.assertEqual(other.name, "count")
        self.assertEqual(other.alias, ("n",))
        self.assertEqual(o.name, "number")
        with self.assertRaises(ValueError):
            copy.replace(o, alias="-x")

    def testEquality(self):
        self.assertEqual(Option("a", type="number"), Option("a", type="number"))
        self.assertNotEqual(Option("a", type="number"), Option("a"))
        self.assertEqual(len({Option("a"), Option("a")}), 1)

    def testRepr(self):
        self.assertTrue(repr(Option("a")).startswith("option(name='a', type=Unset"))


class TestSlots(TestCase):
    """Behavioral tests for Subcommand and Cardinal slots."""

    def testSubcommand(self):
        s = Subcommand("operation", required=True, metavar="get|set")
        self.assertEqual(s.name, "operation")
        self.assertTrue(s.required)
        self.assertEqual(s.metavar, "get|set")

    def testCardinalRest(self):
        self.assertTrue(Cardinal("files", rest=True).rest)
        self.assertFalse(Cardinal("source").rest)

    def testSlotNameValidation(self):
        with self.assertRaises(ValueError):
            Subcommand("  ")
        with self.assertRaises(TypeError):
            Cardinal(5)
        with self.assertRaises(ValueError):
            Cardinal(TAIL)

    def testRepr(self):
        self.assertTrue(repr(Cardinal("files")).startswith("cardinal(name='files'"))
        self.assertTrue(repr(Subcommand("op")).startswith("subcommand(name='op'"))


class TestConversion(TestCase):
    """Behavioral tests for schema value conversion."""

    def testToOptionFromMapping(self):
        o = to_option({"type": "number", "alias": ["n"]}, "number")
        self.assertEqual(o, Option("number", type="number", alias=["n"]))

    def testToOptionBindsName(self):
        o = Option(type="boolean")
        bound = to_option(o, "verbose")
        self.assertEqual(bound.name, "verbose")
        self.assertIs(to_option(bound, "verbose"), bound)

    def testToOptionRejectsOthers(self):
        with self.assertRaises(TypeError):
            to_option(5, "number")

    def testToSlots(self):
        slots = to_slots(Cardinal, [Cardinal("source"), {"name": "files", "rest": True}], TAIL)
        self.assertEqual([slot.name for slot in slots], ["source", "files"])
        self.assertTrue(slots[1].rest)

    def testToSlotsRejectsShapes(self):
        with self.assertRaises(TypeError):
            to_slots(Subcommand, "operation", SUBCOMMANDS)
        with self.assertRaises(TypeError):
            to_slots(Subcommand, [{"required": True}], SUBCOMMANDS)
        with self.assertRaises(TypeError):
            to_slots(Subcommand, [Cardinal("x")], SUBCOMMANDS)

    def testCamelCaseFields(self):
        o = to_option({"defaultValue": 3, "variableName": "count", "description": "How many"}, "number")
        self.assertEqual(o, Option("number", default=3, metavar="count", descr="How many"))
        slots = to_slots(Cardinal, [{"name": "source", "variableName": "uri"}], TAIL)
        self.assertEqual(slots[0].metavar, "uri")

    def testCamelCaseReservedKey(self):
        self.assertEqual(respell_schema({"__subCommands": [], "name": {}}), {SUBCOMMANDS: [], "name": {}})

    def testBothSpellingsRejected(self):
        with self.assertRaises(TypeError):
            respell_fields({"default": 1, "defaultValue": 2})
        with self.assertRaises(TypeError):
            respell_schema({"__subcommands": [], "__subCommands": []})


if __name__ == "__main__":
    unittest.main()
