"""
Fault behavioral tests (codes, rendering, surfacing policy).

Scope
- Validate FaultCode labels and host overrides from __main__.
- Validate copy.replace() option merging and the trigger() contract.
- Validate library mode (raise / warnings.warn) against shell mode (print / exit).
- Validate parser faults in shell mode end to end.

Conventions
- Test method names follow CamelCase per project convention.
- Shell-mode output is captured by patching vexil.faults.console.
"""

from __future__ import annotations

import copy
import io
import sys
import unittest
import warnings
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from vexil import Parser
from vexil.faults import *


def capture():
    return Console(file=io.StringIO(), width=120)


class TestFaultCode(TestCase):
    """Behavioral tests for FaultCode."""

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.MISSING_REQUIRED.normalize(), "21111")

    def testNormalizeHostLabels(self):
        with patch.object(sys.modules["__main__"], "__codes__", {FaultCode.MISSING_REQUIRED: "E-REQ"}, create=True):
            self.assertEqual(FaultCode.MISSING_REQUIRED.normalize(), "E-REQ")
            self.assertEqual(FaultCode.VALIDATION_FAILURE.normalize(), "21101")

    def testCodesAreUnique(self):
        self.assertEqual(len(set(FaultCode)), len(FaultCode.__members__))


class TestFaults(TestCase):
    """Behavioral tests for fault objects and trigger()."""

    def testMessageAndOptions(self):
        error = ParseError("boom", code=FaultCode.VALIDATION_FAILURE)
        self.assertEqual(str(error), "boom")
        self.assertEqual(error.message, "boom")
        self.assertEqual(error.options["code"], FaultCode.VALIDATION_FAILURE)
        with self.assertRaises(TypeError):
            error.options["code"] = None  # type: ignore[index]

    def testReplaceMergesOptions(self):
        error = ValidationError("boom", code=FaultCode.VALIDATION_FAILURE)
        other = copy.replace(error, shell=True)
        self.assertIsInstance(other, ValidationError)
        self.assertTrue(other.options["shell"])
        self.assertEqual(other.options["code"], FaultCode.VALIDATION_FAILURE)
        self.assertNotIn("shell", error.options)

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(object())

    def testTriggerRaisesOutsideShell(self):
        with self.assertRaises(MissingValueError):
            trigger(MissingValueError("no value"))

    def testTriggerExitsInShell(self):
        console = capture()
        with patch("vexil.faults.console", console):
            with self.assertRaises(SystemExit) as context:
                trigger(ParseError("boom"), shell=True, status=4)
        self.assertEqual(context.exception.code, 4)
        self.assertIn("boom", console.file.getvalue())

    def testShellExitDefaultsToOne(self):
        with patch("vexil.faults.console", capture()):
            with self.assertRaises(SystemExit) as context:
                trigger(ParseError("boom"), shell=True)
        self.assertEqual(context.exception.code, 1)

    def testWarningWarnsOutsideShell(self):
        with self.assertWarns(AliasShadowWarning):
            trigger(AliasShadowWarning("careful"))

    def testWarningPrintsInShell(self):
        console = capture()
        with patch("vexil.faults.console", console):
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                trigger(EmptyInlineValueWarning("careful"), shell=True)
        self.assertEqual(caught, [])
        self.assertIn("careful", console.file.getvalue())

    def testRendering(self):
        console = capture()
        console.print(ParseError(
            "boom",
            code=FaultCode.MISSING_REQUIRED,
            title="missing required arguments",
            hint="try again",
            parser=Parser(name="prog", version="1.0.0"),
        ))
        output = console.file.getvalue()
        self.assertIn("[ prog — 21111 | Missing Required Arguments ]", output)
        self.assertIn("boom", output)
        self.assertIn("try again", output)

    def testFancyRendering(self):
        console = capture()
        console.print(ParseWarning("careful", fancy=True, colorful=False))
        self.assertIn("╭", console.file.getvalue())
        self.assertIn("careful", console.file.getvalue())


class TestShellParsing(TestCase):
    """Behavioral tests for parser faults in shell mode."""

    def testMissingRequiredExitsWithStatus(self):
        console = capture()
        parser = Parser({"number": {"required": True}}, name="prog", version="1.0.0", shell=True, status=3)
        with patch("vexil.faults.console", console):
            with self.assertRaises(SystemExit) as context:
                parser.parse([])
        self.assertEqual(context.exception.code, 3)
        self.assertIn("missing required argument", console.file.getvalue())
        self.assertIn("prog --help", console.file.getvalue())

    def testWarningsPrintedInShell(self):
        console = capture()
        parser = Parser({"name": {}}, name="prog", version="1.0.0", shell=True)
        with patch("vexil.faults.console", console):
            result = parser.parse(["--name="])
        self.assertEqual(result["name"], "")
        self.assertIn("empty inline value", console.file.getvalue())


if __name__ == "__main__":
    unittest.main()
