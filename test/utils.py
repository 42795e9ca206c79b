"""
Tests for the shared utilities.

Scope
- The Unset sentinel: singleton identity, falsy semantics, copy/pickle identity, finality.
- coalesce(): only Unset is replaced.
- rename(): function and decorator forms, qualified names.
- mirror()/SpecType: read-only introspection and representations.
- ordinal(): words for small positions, suffixes otherwise.

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from signatory.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsely(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(copy.deepcopy({"value": Unset})["value"], Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionWithTypes(self) -> None:
        """
        Unset can take part in isinstance unions (str | Unset).
        """
        self.assertIsInstance("name", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(42, str | Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class CoalesceTest(TestCase):

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalseyValues(self) -> None:
        # Only Unset is considered "not provided".
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertEqual(coalesce([], [1]), [])


class RenameTest(TestCase):

    def testFunctionForm(self) -> None:
        def work():
            pass

        self.assertIs(rename(work, "do_work"), work)
        self.assertEqual(work.__name__, "do_work")
        self.assertEqual(work.__qualname__, "do_work")

    def testQualifiedForm(self) -> None:
        def hello():
            pass

        rename(hello, "hello", "Greeter.hello")
        self.assertEqual(hello.__name__, "hello")
        self.assertEqual(hello.__qualname__, "Greeter.hello")

    def testDecoratorForm(self) -> None:
        @rename("do_work")
        def work():
            pass

        self.assertEqual(work.__name__, "do_work")

    def testRejectsBuiltins(self) -> None:
        with self.assertRaises(TypeError):
            rename(len, "length")

    def testRejectsNonStrings(self) -> None:
        with self.assertRaises(TypeError):
            rename(lambda: None, 42)
        with self.assertRaises(TypeError):
            rename(42)(lambda: None)

    def testArity(self) -> None:
        with self.assertRaises(TypeError):
            rename()


class OrdinalTest(TestCase):

    def testWords(self) -> None:
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self) -> None:
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")


class SpecTypeTest(TestCase):
    """
    SpecType publishes introspectable fields as read-only copies.
    """

    def setUp(self) -> None:
        class SampleSpec(metaclass=SpecType):
            __introspectable__ = ("items", "label", "missing")
            __displayable__ = ("label",)

            def __init__(self):
                self._items = [1, {"nested": [2]}]
                self._label = "sample"
                self._missing = Unset

        self.spec = SampleSpec()

    def testTypename(self) -> None:
        self.assertEqual(type(self.spec).__typename__, "sample-spec")

    def testMirrorCopiesContainers(self) -> None:
        self.assertEqual(self.spec.items, (1, {"nested": (2,)}))
        self.assertIsNone(self.spec.missing)

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.spec.label = "other"

    def testExplicitPropertyIsKept(self) -> None:
        class RawSpec(metaclass=SpecType):
            __introspectable__ = ("items",)

            def __init__(self):
                self._items = [1, 2]

            @property
            def items(self):
                return self._items

        spec = RawSpec()
        self.assertIs(spec.items, spec._items)
        self.assertEqual(repr(spec), "raw-spec(items=[1, 2])")

    def testRepr(self) -> None:
        self.assertEqual(repr(self.spec), "sample-spec(label='sample')")
        self.assertEqual(list(self.spec.__rich_repr__()), [("label", "sample")])


if __name__ == '__main__':
    unittest.main()
