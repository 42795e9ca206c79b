"""
Signatory type constraints and roles.

Overview
- TypeConstraint: a named predicate with an optional parent (checked first) and
  an ordered list of coercions into it. Parameters use two capabilities only:
  • check(value) -> bool
  • coerce(value) -> value | Unset (Unset when no registered coercion applies)
- Role: a named duck-typing requirement. A requirement is either a class
  (checked with isinstance, so ABCs and runtime-checkable protocols work) or an
  attribute name (checked with hasattr).

Registry
- Constraints are registered by name with subtype(...) and looked up with
  find_type_constraint(...). Lookups understand:
  • plain names: "Int", "Str", ...
  • parameterized names: "ArrayRef[Int]", "HashRef[Str]", "Maybe[Int]"
  • unions: "Int | Str" (members may be parameterized)
  • classes: find_type_constraint(Path) builds an isinstance-based constraint
  • any object exposing a callable check(...) is accepted as-is
- Coercions are registered with coerce(name, source, via); a coercion applies
  when the source constraint accepts the value.
- Roles are registered with register_role(...). Every ABC of collections.abc
  is registered under its own name ("Iterable", "Sized", "Hashable", ...).

Built-in constraint names
    Any
    Item
        Undef
        Defined
            Bool
            Value
                Str
                Num
                    Int
                    Float
            ArrayRef[`a]
            HashRef[`a]
            CodeRef
            ClassName
            Object
    Maybe[`a]

Registration is meant to happen at import/setup time; lookups are read-only
and safe to share across threads.

Quick example:
    >>> positive = subtype("PositiveInt", "Int", lambda value: value > 0)
    >>> positive = coerce("PositiveInt", "Str", int)
    >>> positive.coerce("42")
    42
    >>> find_type_constraint("ArrayRef[PositiveInt]").check([1, 2, 3])
    True
"""
import collections.abc
import functools
import numbers
import re
from collections.abc import Mapping, Sequence

from .utils import *


class TypeConstraint(metaclass=SpecType):
    """
    Named value predicate with coercions.

    A value satisfies a constraint when it satisfies the parent (if any) and the
    `where` predicate (if any). A constraint with neither accepts everything.
    """

    __introspectable__ = (
        "name",
        "parent",
        "coercions",
    )
    __displayable__ = (
        "name",
    )

    def __init__(self, name, /, parent=Unset, where=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} name must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} name cannot be empty")
        if not isinstance(parent, TypeConstraint | Unset):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a type-constraint")
        if where is not Unset and not callable(where):
            raise TypeError(f"{type(self).__typename__} 'where' must be callable")
        self._name = name
        self._parent = parent
        self._where = where
        self._coercions = []

    def check(self, value, /):
        if self._parent is not Unset and not self._parent.check(value):
            return False
        return self._where is Unset or bool(self._where(value))

    def coerce(self, value, /):
        """
        Convert value with the first coercion whose source accepts it.

        Returns Unset when no coercion applies. Errors raised by the conversion
        routine propagate to the caller.
        """
        for source, via in self._coercions:
            if source.check(value):
                return via(value)
        return Unset

    def add_coercion(self, source, via, /):
        if not callable(getattr(source, "check", None)):
            raise TypeError(f"{type(self).__typename__} coercion source must be a type-constraint")
        if not callable(via):
            raise TypeError(f"{type(self).__typename__} coercion must be callable")
        self._coercions.append((source, via))

    @property
    def has_coercion(self):
        return bool(self._coercions)


class Role(metaclass=SpecType):
    """
    Named duck-typing requirement (what a value must be able to do).
    """

    __introspectable__ = (
        "name",
        "requirements",
    )

    def __init__(self, name, /, *requirements):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} name must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} name cannot be empty")
        if not requirements:
            raise TypeError(f"{type(self).__typename__} must specify at least one requirement")
        for requirement in requirements:
            if not isinstance(requirement, type | str):
                raise TypeError(f"{type(self).__typename__} requirements must be classes or attribute names")
            if isinstance(requirement, str) and not requirement.isidentifier():
                raise ValueError(f"{type(self).__typename__} attribute requirements must be identifiers")
        self._name = name
        self._requirements = requirements

    def check(self, value, /):
        for requirement in self._requirements:
            if isinstance(requirement, type):
                if not isinstance(value, requirement):
                    return False
            elif not hasattr(value, requirement):
                return False
        return True


_constraints = {}
_roles = {}


def _split(source, /):
    """
    split a union source on top-level '|' (bars nested in brackets are kept).
    """
    members = []
    depth = 0
    start = 0
    for index, char in enumerate(source):
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif char == "|" and not depth:
            members.append(source[start:index].strip())
            start = index + 1
    members.append(source[start:].strip())
    return members


def _array_of(inner, /):
    return TypeConstraint(
        f"ArrayRef[{inner.name}]",
        parent=_constraints["ArrayRef"],
        where=lambda value: all(map(inner.check, value))
    )


def _hash_of(inner, /):
    return TypeConstraint(
        f"HashRef[{inner.name}]",
        parent=_constraints["HashRef"],
        where=lambda value: all(map(inner.check, value.values()))
    )


def _maybe(inner, /):
    return TypeConstraint(
        f"Maybe[{inner.name}]",
        where=lambda value: value is None or inner.check(value)
    )


_containers = {
    "ArrayRef": _array_of,
    "HashRef": _hash_of,
    "Maybe": _maybe,
}


def _parse(source, /):
    """
    resolve a constraint source string; Unset when any part is unknown.

    parameterized and union constraints are registered under their canonical
    name the first time they are built, so later lookups share the instance.
    """
    try:
        return _constraints[source := source.strip()]
    except KeyError:
        pass

    if len(members := _split(source)) > 1:
        resolved = tuple(map(_parse, members))
        if any(member is Unset for member in resolved):
            return Unset
        constraint = TypeConstraint(
            " | ".join(member.name for member in resolved),
            where=lambda value: any(member.check(value) for member in resolved)
        )
    elif match := re.fullmatch(r"(\w+)\[(.+)\]", source, re.DOTALL):
        try:
            container = _containers[match[1]]
        except KeyError:
            return Unset
        if (inner := _parse(match[2])) is Unset:
            return Unset
        constraint = container(inner)
    else:
        return Unset

    return _constraints.setdefault(constraint.name, constraint)


@functools.cache
def _class_type(cls, /):
    return TypeConstraint(cls.__qualname__, where=lambda value: isinstance(value, cls))


def find_type_constraint(reference, /):
    """
    resolve a constraint reference to an object exposing check(value).

    references
    - TypeConstraint → returned as-is
    - class          → isinstance-based constraint (one per class)
    - str            → registered name, parameterized name, or union
    - any object with a callable check attribute → returned as-is

    returns Unset when the reference cannot be resolved.
    """
    if isinstance(reference, TypeConstraint):
        return reference
    if isinstance(reference, type):
        return _class_type(reference)
    if isinstance(reference, str):
        return _parse(reference)
    if callable(getattr(reference, "check", None)):
        return reference
    return Unset


def subtype(name, /, parent=Unset, where=Unset):
    """
    define and register a named constraint.

    parameters
    - name: str, an identifier not registered yet.
    - parent: constraint reference checked before `where` (see find_type_constraint).
    - where: predicate called with the value; truthy means accepted.

    returns the new TypeConstraint.
    """
    if not isinstance(name, str):
        raise TypeError("subtype() name must be a string")
    elif not re.fullmatch(r"(?!\d)\w+", name := name.strip()):
        raise ValueError("subtype() name must be an identifier")
    elif name in _constraints:
        raise ValueError(f"type constraint {name!r} is already defined")

    if parent is not Unset and (resolved := find_type_constraint(parent)) is Unset:
        raise ValueError(f"unknown parent type constraint {parent!r}")

    constraint = TypeConstraint(name, parent=resolved if parent is not Unset else Unset, where=where)
    _constraints[name] = constraint
    return constraint


def coerce(name, source, via, /):
    """
    register a coercion into constraint `name` from values accepted by `source`.

    example
    - coerce("Int", "Str", int) lets Int parameters declared with coerce=True
      accept "42".
    """
    if (target := find_type_constraint(name)) is Unset:
        raise ValueError(f"unknown type constraint {name!r}")
    if (origin := find_type_constraint(source)) is Unset:
        raise ValueError(f"unknown type constraint {source!r}")
    if not callable(getattr(target, "add_coercion", None)):
        raise TypeError(f"type constraint {name!r} does not support coercions")
    target.add_coercion(origin, via)
    return target


@functools.cache
def _class_role(cls, /):
    return Role(cls.__qualname__, cls)


def register_role(name, /, *requirements):
    """
    define and register a named role (see Role for requirement forms).
    """
    if name in _roles:
        raise ValueError(f"role {name!r} is already defined")
    role = Role(name, *requirements)
    _roles[role.name] = role
    return role


def find_role(reference, /):
    """
    resolve a role reference (Role, class, registered name, or duck object with check).

    returns Unset when the reference cannot be resolved.
    """
    if isinstance(reference, Role):
        return reference
    if isinstance(reference, type):
        return _class_role(reference)
    if isinstance(reference, str):
        return _roles.get(reference.strip(), Unset)
    if callable(getattr(reference, "check", None)):
        return reference
    return Unset


def satisfies(value, role, /):
    """
    tell whether value satisfies the given role reference.
    """
    if (resolved := find_role(role)) is Unset:
        raise ValueError(f"unknown role {role!r}")
    return bool(resolved.check(value))


subtype("Any")
subtype("Item")
subtype("Undef", "Item", lambda value: value is None)
subtype("Defined", "Item", lambda value: value is not None)
subtype("Bool", "Defined", lambda value: isinstance(value, bool))
subtype("Value", "Defined", lambda value: isinstance(value, str | bytes | numbers.Number))
subtype("Str", "Value", lambda value: isinstance(value, str))
subtype("Num", "Value", lambda value: isinstance(value, numbers.Real) and not isinstance(value, bool))
subtype("Int", "Num", lambda value: isinstance(value, numbers.Integral))
subtype("Float", "Num", lambda value: isinstance(value, float))
subtype("ArrayRef", "Defined", lambda value: isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray))
subtype("HashRef", "Defined", lambda value: isinstance(value, Mapping))
subtype("CodeRef", "Defined", callable)
subtype("ClassName", "Defined", lambda value: isinstance(value, type))
subtype("Object", "Defined", lambda value: not isinstance(value, type) and type(value).__module__ != "builtins")

for _name in collections.abc.__all__:
    if isinstance(_abc := getattr(collections.abc, _name), type):
        register_role(_name, _abc)
del _name, _abc


__all__ = (
    # Classes
    "TypeConstraint",
    "Role",

    # Registry
    "find_type_constraint",
    "subtype",
    "coerce",
    "register_role",
    "find_role",
    "satisfies",
)
