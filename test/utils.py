# python
"""
Utils behavioral tests (Unset sentinel, coalesce, ordinal labels).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argflags.utils import Unset, UnsetType, coalesce, ordinal


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", Unset | str)


class TestCoalesce(TestCase):
    """Behavioral tests for coalesce()."""

    def testOnlyUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        for value in (None, 0, "", []):
            with self.subTest(value=value):
                self.assertEqual(coalesce(value, "fallback"), value)


class TestOrdinal(TestCase):
    """Behavioral tests for ordinal()."""

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        for number, expected in (
            (11, "11th"), (12, "12th"), (13, "13th"),
            (21, "21st"), (22, "22nd"), (23, "23rd"), (24, "24th"),
            (101, "101st"), (111, "111th"), (112, "112th"),
        ):
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), expected)

    def testRejectsNonPositive(self):
        for number in (0, -1, "2"):
            with self.subTest(number=number):
                with self.assertRaises(ValueError):
                    ordinal(number)


if __name__ == "__main__":
    unittest.main()
