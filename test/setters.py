# python
"""
Setters behavioral tests (text-decoding hook, collections, zero values).

Scope
- Validate setter dispatch per field type (scalar, nullable, collection, decodable, unsupported).
- Validate the __unmarshal_text__ hook: precedence, in-place reuse, allocation, failure chaining.
- Validate list assignment: comma splitting, element decoding, replace semantics, atomic failure.
- Validate zero-value allocation for scalars, lists, optionals and dataclasses.

Conventions
- Test method names follow CamelCase per project convention.
- Values are bound through findfield(...).setvalue(...), the same path applyto() takes.
"""

from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from unittest import TestCase

from argflags import findfield, CoercionError, UnsupportedFieldTypeError, ConfigurationError, int8
from argflags.setters import (
    setter,
    zero,
    Scalar,
    Nullable,
    Collection,
    Decodable,
    Unsupported,
)


class Endpoint:
    """host:port pair decoded from text."""

    def __init__(self):
        self.host = ""
        self.port = 0

    def __unmarshal_text__(self, text):
        host, separator, port = text.decode().partition(":")
        if not separator:
            raise ValueError(f"missing port in {text!r}")
        self.host, self.port = host, int(port)


class Semicolons(list):
    """a list decoding itself from ';'-separated text."""

    def __unmarshal_text__(self, text):
        self[:] = text.decode().split(";")


class Opaque:
    def __init__(self, required):
        self.required = required

    def __unmarshal_text__(self, text):
        self.required = text


@dataclass
class Inner:
    label: str
    size: int
    flags: list[str]
    maybe: int | None
    level: int8


@dataclass
class Record:
    tags: list[str] = field(default_factory=list)
    ports: list[int] = field(default_factory=list)
    peers: list[Endpoint] = field(default_factory=list)
    sparse: list[int | None] = field(default_factory=list)
    matrix: list[list[int]] = field(default_factory=list)
    pair: tuple[int, int] = (0, 0)
    endpoint: Endpoint | None = None
    gateway: Endpoint = field(default_factory=Endpoint)
    columns: Semicolons = field(default_factory=Semicolons)
    opaque: Opaque | None = None
    limit: int | None = None


class TestSetterDispatch(TestCase):
    """Behavioral tests for setter() variant selection."""

    def testScalarKinds(self):
        for kind in (str, bool, int, float, int8):
            with self.subTest(kind=kind):
                self.assertIsInstance(setter(kind), Scalar)

    def testBooleanWindowFlag(self):
        self.assertTrue(setter(bool).boolean)
        self.assertTrue(setter(bool | None).boolean)
        self.assertFalse(setter(int).boolean)
        self.assertFalse(setter(list[bool]).boolean)

    def testNullableWrapsInner(self):
        variant = setter(int | None)
        self.assertIsInstance(variant, Nullable)
        self.assertIsInstance(variant.inner, Scalar)

    def testCollectionWrapsElement(self):
        variant = setter(list[Endpoint])
        self.assertIsInstance(variant, Collection)
        self.assertIsInstance(variant.element, Decodable)

    def testDecodableTakesPrecedenceOverCollection(self):
        self.assertIsInstance(setter(Semicolons), Decodable)

    def testUnsupportedKinds(self):
        for kind in (dict[str, str], tuple[int, int], int | str, complex, list):
            with self.subTest(kind=kind):
                self.assertIsInstance(setter(kind), Unsupported)

    def testNestedCollectionUnsupported(self):
        variant = setter(list[list[int]])
        self.assertIsInstance(variant, Collection)
        self.assertIsInstance(variant.element, Unsupported)


class TestTextDecodableHook(TestCase):
    """Behavioral tests for the __unmarshal_text__ hook."""

    def testNoneFieldIsAllocated(self):
        record = Record()
        findfield("endpoint", record).setvalue("example.org:443")
        self.assertIsInstance(record.endpoint, Endpoint)
        self.assertEqual((record.endpoint.host, record.endpoint.port), ("example.org", 443))

    def testExistingInstanceIsReused(self):
        record = Record()
        gateway = record.gateway
        findfield("gateway", record).setvalue("10.0.0.1:8080")
        self.assertIs(record.gateway, gateway)
        self.assertEqual(gateway.port, 8080)

    def testHookBypassesCollectionSplitting(self):
        record = Record()
        findfield("columns", record).setvalue("a;b,c")
        self.assertEqual(record.columns, ["a", "b,c"])
        self.assertIsInstance(record.columns, Semicolons)

    def testHookFailureIsChained(self):
        record = Record()
        with self.assertRaises(CoercionError) as context:
            findfield("endpoint", record).setvalue("no-port")
        self.assertIsInstance(context.exception.__cause__, ValueError)
        self.assertIsInstance(context.exception.cause, ValueError)
        self.assertIn("missing port", str(context.exception))
        self.assertEqual(context.exception.options["field"], "endpoint")

    def testUnallocatableTypeIsConfigurationError(self):
        record = Record()
        with self.assertRaises(ConfigurationError):
            findfield("opaque", record).setvalue("text")


class TestCollectionAssignment(TestCase):
    """Behavioral tests for list fields."""

    def testCommaSplitting(self):
        record = Record()
        findfield("tags", record).setvalue("a,b,c")
        self.assertEqual(record.tags, ["a", "b", "c"])

    def testNoTrimmingNoQuoting(self):
        record = Record()
        findfield("tags", record).setvalue(' a ,"b,c"')
        self.assertEqual(record.tags, [" a ", '"b', 'c"'])

    def testEmptyStringIsOneEmptyElement(self):
        record = Record()
        findfield("tags", record).setvalue("")
        self.assertEqual(record.tags, [""])

    def testElementsAreCoerced(self):
        record = Record()
        findfield("ports", record).setvalue("80,443")
        self.assertEqual(record.ports, [80, 443])

    def testElementsAreDecoded(self):
        record = Record()
        findfield("peers", record).setvalue("a:1,b:2")
        self.assertEqual([(peer.host, peer.port) for peer in record.peers], [("a", 1), ("b", 2)])

    def testNullableElements(self):
        record = Record()
        findfield("sparse", record).setvalue("1,2")
        self.assertEqual(record.sparse, [1, 2])

    def testRepeatedAssignmentReplaces(self):
        record = Record(tags=["old"])
        findfield("tags", record).setvalue("new")
        self.assertEqual(record.tags, ["new"])

    def testFailureLeavesFieldUntouched(self):
        record = Record(ports=[9])
        original = record.ports
        with self.assertRaises(CoercionError):
            findfield("ports", record).setvalue("1,2,x")
        self.assertIs(record.ports, original)
        self.assertEqual(record.ports, [9])

    def testNestedCollectionsUnsupported(self):
        record = Record()
        with self.assertRaises(UnsupportedFieldTypeError):
            findfield("matrix", record).setvalue("1,2")
        self.assertEqual(record.matrix, [])

    def testTuplesUnsupported(self):
        record = Record()
        with self.assertRaises(UnsupportedFieldTypeError):
            findfield("pair", record).setvalue("1,2")


class TestNullableScalars(TestCase):
    """Behavioral tests for optional scalar fields."""

    def testNoneScalarIsSet(self):
        record = Record()
        findfield("limit", record).setvalue("5")
        self.assertEqual(record.limit, 5)


class TestZero(TestCase):
    """Behavioral tests for zero-value allocation."""

    def testScalars(self):
        self.assertEqual(zero(str), "")
        self.assertIs(zero(bool), False)
        self.assertEqual(zero(int), 0)
        self.assertEqual(zero(float), 0.0)
        self.assertIsInstance(zero(int8), int8)

    def testContainersAndOptionals(self):
        self.assertEqual(zero(list[int]), [])
        self.assertEqual(zero(list), [])
        self.assertIsNone(zero(Endpoint | None))

    def testDataclassRequiredFieldsAreZeroed(self):
        self.assertEqual(zero(Inner), Inner(label="", size=0, flags=[], maybe=None, level=int8(0)))

    def testUnallocatableType(self):
        with self.assertRaises(ConfigurationError):
            zero(Opaque)


if __name__ == "__main__":
    unittest.main()
