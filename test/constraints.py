"""
Tests for the type-constraint and role registries.

Scope
- Built-in constraint hierarchy (Any, Item, Defined, Value, Str, Num, Int, ...).
- Parameterized (ArrayRef[T], HashRef[T], Maybe[T]) and union ("A | B") lookups.
- subtype()/coerce() registration and TypeConstraint.coerce().
- Roles: collections.abc names, attribute requirements, satisfies().

Conventions
- Test method names follow CamelCase per project convention.
- The registries are process-global: every name registered here is prefixed
  with the suite name so it cannot collide with other suites.
"""
import collections.abc
import io
import pathlib
import unittest
from unittest import TestCase

from signatory.constraints import *
from signatory.utils import Unset


class BuiltinConstraintTest(TestCase):

    def check(self, name, value):
        return find_type_constraint(name).check(value)

    def testAnyAndItem(self) -> None:
        for value in (None, 0, "", object(), int):
            self.assertTrue(self.check("Any", value))
            self.assertTrue(self.check("Item", value))

    def testUndefAndDefined(self) -> None:
        self.assertTrue(self.check("Undef", None))
        self.assertFalse(self.check("Undef", 0))
        self.assertTrue(self.check("Defined", 0))
        self.assertFalse(self.check("Defined", None))

    def testScalars(self) -> None:
        self.assertTrue(self.check("Bool", False))
        self.assertFalse(self.check("Bool", 0))
        self.assertTrue(self.check("Str", "world"))
        self.assertFalse(self.check("Str", b"world"))
        self.assertTrue(self.check("Value", b"world"))
        self.assertTrue(self.check("Num", 1.5))
        self.assertTrue(self.check("Int", 42))
        self.assertFalse(self.check("Int", 4.2))
        self.assertFalse(self.check("Int", "42"))
        self.assertTrue(self.check("Float", 4.2))

    def testBooleansAreNotNumbers(self) -> None:
        self.assertFalse(self.check("Num", True))
        self.assertFalse(self.check("Int", False))

    def testReferences(self) -> None:
        self.assertTrue(self.check("ArrayRef", [1, "a"]))
        self.assertTrue(self.check("ArrayRef", (1, 2)))
        self.assertFalse(self.check("ArrayRef", "abc"))
        self.assertTrue(self.check("HashRef", {"a": 1}))
        self.assertFalse(self.check("HashRef", [("a", 1)]))
        self.assertTrue(self.check("CodeRef", len))
        self.assertTrue(self.check("ClassName", int))
        self.assertFalse(self.check("ClassName", 1))

    def testObject(self) -> None:
        class Point:
            pass

        self.assertTrue(self.check("Object", Point()))
        self.assertFalse(self.check("Object", 42))
        self.assertFalse(self.check("Object", Point))


class LookupTest(TestCase):

    def testUnknownNames(self) -> None:
        self.assertIs(find_type_constraint("NoSuchConstraint"), Unset)
        self.assertIs(find_type_constraint("Tuple[Int]"), Unset)
        self.assertIs(find_type_constraint("ArrayRef[NoSuchConstraint]"), Unset)
        self.assertIs(find_type_constraint("Int | NoSuchConstraint"), Unset)
        self.assertIs(find_type_constraint(42), Unset)

    def testParameterized(self) -> None:
        integers = find_type_constraint("ArrayRef[Int]")
        self.assertEqual(integers.name, "ArrayRef[Int]")
        self.assertTrue(integers.check([1, 2, 3]))
        self.assertTrue(integers.check([]))
        self.assertFalse(integers.check([1, "2"]))
        self.assertFalse(integers.check({1: 2}))

        strings = find_type_constraint("HashRef[Str]")
        self.assertTrue(strings.check({"a": "b"}))
        self.assertFalse(strings.check({"a": 1}))

        nested = find_type_constraint("ArrayRef[HashRef[Int]]")
        self.assertTrue(nested.check([{"a": 1}, {}]))
        self.assertFalse(nested.check([{"a": "1"}]))

    def testMaybe(self) -> None:
        maybe = find_type_constraint("Maybe[Int]")
        self.assertTrue(maybe.check(None))
        self.assertTrue(maybe.check(3))
        self.assertFalse(maybe.check("3"))

    def testUnion(self) -> None:
        union = find_type_constraint("Int|ArrayRef[Str | Int]")
        self.assertEqual(union.name, "Int | ArrayRef[Str | Int]")
        self.assertTrue(union.check(1))
        self.assertTrue(union.check(["a", 1]))
        self.assertFalse(union.check("a"))

    def testBuiltConstraintsAreShared(self) -> None:
        self.assertIs(find_type_constraint("ArrayRef[Str]"), find_type_constraint(" ArrayRef[Str] "))
        self.assertIs(find_type_constraint("Int"), find_type_constraint("Int"))

    def testClasses(self) -> None:
        paths = find_type_constraint(pathlib.PurePath)
        self.assertIs(paths, find_type_constraint(pathlib.PurePath))
        self.assertTrue(paths.check(pathlib.PurePosixPath("/tmp")))
        self.assertFalse(paths.check("/tmp"))

    def testDuckConstraints(self) -> None:
        class Even:
            def check(self, value):
                return value % 2 == 0

        even = Even()
        self.assertIs(find_type_constraint(even), even)


class SubtypeTest(TestCase):

    def testWhereAndParent(self) -> None:
        positive = subtype("SubtypeTestPositive", "Int", lambda value: value > 0)
        self.assertIs(find_type_constraint("SubtypeTestPositive"), positive)
        self.assertIs(positive.parent, find_type_constraint("Int"))
        self.assertTrue(positive.check(1))
        self.assertFalse(positive.check(0))
        # The parent is checked first, so the predicate never sees a string.
        self.assertFalse(positive.check("1"))

    def testSubtypeOfSubtype(self) -> None:
        subtype("SubtypeTestSmall", "Int", lambda value: value < 10)
        tiny = subtype("SubtypeTestTiny", "SubtypeTestSmall", lambda value: value < 3)
        self.assertTrue(tiny.check(2))
        self.assertFalse(tiny.check(5))
        self.assertTrue(find_type_constraint("ArrayRef[SubtypeTestTiny]").check([0, 1, 2]))

    def testDuplicateNames(self) -> None:
        subtype("SubtypeTestTwice")
        with self.assertRaises(ValueError):
            subtype("SubtypeTestTwice")
        with self.assertRaises(ValueError):
            subtype("Int")

    def testInvalidDefinitions(self) -> None:
        with self.assertRaises(ValueError):
            subtype("SubtypeTestOrphan", "NoSuchConstraint")
        with self.assertRaises(ValueError):
            subtype("not a name")
        with self.assertRaises(TypeError):
            subtype(42)
        with self.assertRaises(TypeError):
            subtype("SubtypeTestNotCallable", "Int", 42)


class CoercionTest(TestCase):

    def setUp(self) -> None:
        self.celsius = find_type_constraint("CoercionTestCelsius")
        if self.celsius is Unset:
            self.celsius = subtype("CoercionTestCelsius", "Num")
            coerce("CoercionTestCelsius", "Str", float)
            coerce("CoercionTestCelsius", "ArrayRef", len)

    def testHasCoercion(self) -> None:
        self.assertTrue(self.celsius.has_coercion)
        self.assertFalse(find_type_constraint("Undef").has_coercion)

    def testFirstMatchingSourceWins(self) -> None:
        self.assertEqual(self.celsius.coerce("21.5"), 21.5)
        self.assertEqual(self.celsius.coerce([1, 2]), 2)

    def testNoMatchingSource(self) -> None:
        self.assertIs(self.celsius.coerce({"degrees": 21}), Unset)

    def testRoutineErrorsPropagate(self) -> None:
        with self.assertRaises(ValueError):
            self.celsius.coerce("warm")

    def testUnknownConstraints(self) -> None:
        with self.assertRaises(ValueError):
            coerce("NoSuchConstraint", "Str", float)
        with self.assertRaises(ValueError):
            coerce("CoercionTestCelsius", "NoSuchConstraint", float)


class RoleTest(TestCase):

    def testCollectionRoles(self) -> None:
        self.assertTrue(satisfies([], "Sized"))
        self.assertTrue(satisfies("abc", "Iterable"))
        self.assertTrue(satisfies({}, "Mapping"))
        self.assertFalse(satisfies(3, "Iterable"))
        self.assertFalse(satisfies([], "Hashable"))

    def testAttributeRoles(self) -> None:
        class Duck:
            def quack(self):
                return "quack"

        role = register_role("RoleTestQuacks", "quack")
        self.assertIs(find_role("RoleTestQuacks"), role)
        self.assertTrue(satisfies(Duck(), "RoleTestQuacks"))
        self.assertFalse(satisfies(object(), "RoleTestQuacks"))

    def testMixedRequirements(self) -> None:
        class Buffer:
            def __len__(self):
                return 0

            def read(self):
                return ""

        register_role("RoleTestSizedReader", collections.abc.Sized, "read")
        self.assertTrue(satisfies(Buffer(), "RoleTestSizedReader"))
        self.assertFalse(satisfies([], "RoleTestSizedReader"))
        self.assertFalse(satisfies(io.StringIO(), "RoleTestSizedReader"))

    def testClassRoles(self) -> None:
        self.assertTrue(satisfies(pathlib.PurePosixPath("/"), pathlib.PurePath))
        self.assertFalse(satisfies("/", pathlib.PurePath))

    def testDuplicateRoles(self) -> None:
        register_role("RoleTestTwice", "read")
        with self.assertRaises(ValueError):
            register_role("RoleTestTwice", "read")

    def testInvalidRoles(self) -> None:
        with self.assertRaises(TypeError):
            Role("RoleTestEmpty")
        with self.assertRaises(ValueError):
            Role("RoleTestBadAttribute", "not an attribute")
        with self.assertRaises(TypeError):
            Role("RoleTestBadRequirement", 42)

    def testUnknownRole(self) -> None:
        self.assertIs(find_role("NoSuchRole"), Unset)
        with self.assertRaises(ValueError):
            satisfies([], "NoSuchRole")


if __name__ == '__main__':
    unittest.main()
