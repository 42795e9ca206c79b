r"""
Signatory parameter specifications.

Overview
- Parameter: the contract one argument has to satisfy.
  • isa: type constraint reference (see signatory.constraints.find_type_constraint).
  • does: role reference (see signatory.constraints.find_role).
  • default: value used when the argument is omitted; a callable default is a
    zero-argument producer evaluated on every omission.
  • required: omitting the argument is an error unless a default exists.
  • coerce: when the value fails `isa`, try the constraint's coercions first.

- Literal specs
  • Parameter.build(spec, name=...) turns a literal mapping such as
    {"isa": "Int", "required": True} into a Parameter. Recognized keys:
    isa, does, default, required, coerce, metaclass.
  • metaclass selects the Parameter subclass to construct.

Validation (Parameter.validate)
1. absent value → default (producer evaluated), else missing-required fault when
   required, else Unset (the parameter is left out of the verified arguments).
2. does → role fault when the value cannot do the role.
3. isa → coercion (when enabled) or type fault when the value does not pass.
4. the (possibly coerced) value is returned.

Metadata is sanitized on construction; any problem is an
InvalidDeclarationArgumentError raised at declaration time, never during a call.

Quick example:
    >>> age = Parameter("age", isa="Int", required=True)
    >>> age.validate(42)
    42
    >>> age.validate()
    Traceback (most recent call last):
    ...
    signatory.faults.MissingRequiredParameterError: missing required parameter 'age'
"""
import reprlib
from collections.abc import Mapping

from .constraints import find_type_constraint, find_role
from .faults import *
from .utils import *


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate parameter metadata.

    Responsibilities
    - name: Unset or a non-empty identifier string.
    - isa/does: resolved into constraint/role objects; unresolvable references
      are rejected.
    - coerce: requires an isa constraint exposing a callable coerce().

    Side effects
    - Mutates the provided metadata dict in place.
    """
    if not isinstance(name := metadata["name"], str | Unset):
        raise InvalidDeclarationArgumentError(
            f"{cls.__typename__} name must be a string",
            title="invalid parameter name",
            code=FaultCode.INVALID_DECLARATION_ARGUMENT,
            hint="use an identifier such as 'age'",
            value=name,
        )
    elif isinstance(name, str) and not (name := name.strip()).isidentifier():
        raise InvalidDeclarationArgumentError(
            f"{cls.__typename__} name {name!r} is not an identifier",
            title="invalid parameter name",
            code=FaultCode.INVALID_DECLARATION_ARGUMENT,
            hint="use an identifier such as 'age'",
            value=name,
        )
    metadata["name"] = name

    if (isa := metadata["isa"]) is not Unset:
        if (constraint := find_type_constraint(isa)) is Unset:
            raise InvalidDeclarationArgumentError(
                f"{cls.__typename__} {_label(name)} has an unknown type constraint {isa!r}",
                title="unknown type constraint",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="define it first with subtype(...) or pass a class",
                parameter=coalesce(name),
                value=isa,
            )
        metadata["isa"] = constraint

    if (does := metadata["does"]) is not Unset:
        if (role := find_role(does)) is Unset:
            raise InvalidDeclarationArgumentError(
                f"{cls.__typename__} {_label(name)} requires an unknown role {does!r}",
                title="unknown role",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="define it first with register_role(...) or pass a class",
                parameter=coalesce(name),
                value=does,
            )
        metadata["does"] = role

    if metadata["coerce"]:
        if metadata["isa"] is Unset:
            raise InvalidDeclarationArgumentError(
                f"{cls.__typename__} {_label(name)} cannot coerce without a type constraint",
                title="coercion without type",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="add an 'isa' next to 'coerce'",
                parameter=coalesce(name),
            )
        if not callable(getattr(metadata["isa"], "coerce", None)):
            raise InvalidDeclarationArgumentError(
                f"{cls.__typename__} {_label(name)} type constraint does not support coercion",
                title="coercion not supported",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="use a constraint that provides coerce(value)",
                parameter=coalesce(name),
            )


def _label(name, position=Unset, /):
    if name is not Unset:
        return "parameter %r" % name
    if position is not Unset:
        return "parameter at %s position" % ordinal(position)
    return "parameter"


def _typename(constraint, /):
    return getattr(constraint, "name", None) or repr(constraint)


class Parameter(metaclass=SpecType):
    """
    Specification of a single argument.

    Parameters are immutable once built: every field listed in
    __introspectable__ is a read-only property over the sanitized metadata.
    `default` returns the declared object itself (the one validate() hands
    out), and reads as None when no default was declared; use has_default to
    tell the two apart.
    """

    __introspectable__ = (
        "name",
        "isa",
        "does",
        "required",
        "default",
        "coerce",
    )

    __recognized__ = frozenset({
        "isa",
        "does",
        "default",
        "required",
        "coerce",
        "metaclass",
    })

    def __init__(
            self,
            name=Unset,
            /,
            isa=Unset,
            does=Unset,
            default=Unset,
            required=False,
            coerce=False
    ):
        metadata = {
            "name": name,
            "isa": isa,
            "does": does,
            "required": bool(required),
            "default": default,
            "coerce": bool(coerce),
        }
        _sanitize_metadata(type(self), metadata)

        for field, object in metadata.items():
            setattr(self, "_" + field, object)

    @classmethod
    def build(cls, spec, /, name=Unset, **overrides):
        """
        Build a parameter from a literal spec mapping (or pass a Parameter through).

        Parameters
        - spec: Mapping with keys among __recognized__, or a Parameter.
        - name: parameter name (named parameters only).
        - overrides: fields forced by the enclosing signature (e.g. required=True).

        Raises
        - InvalidDeclarationArgumentError: not a mapping, unknown keys, or a
          metaclass that is not a Parameter subclass.
        """
        if isinstance(spec, Parameter):
            if name is not Unset:
                overrides["name"] = name
            return spec.__replace__(**overrides) if overrides else spec

        if not isinstance(spec, Mapping):
            raise InvalidDeclarationArgumentError(
                f"{cls.__typename__} spec for {_label(name)} must be a mapping, not {type(spec).__name__}",
                title="invalid parameter spec",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="declare parameters as mappings, e.g. {'isa': 'Int', 'required': True}",
                parameter=coalesce(name),
                value=spec,
            )

        if unknown := sorted(map(str, set(spec) - cls.__recognized__)):
            raise InvalidDeclarationArgumentError(
                f"{cls.__typename__} spec for {_label(name)} has unknown keys: {", ".join(unknown)}",
                title="invalid parameter spec",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="use only: %s" % ", ".join(sorted(cls.__recognized__)),
                parameter=coalesce(name),
                value=spec,
            )

        metadata = dict(spec) | overrides
        metaclass = metadata.pop("metaclass", cls)
        if not isinstance(metaclass, type) or not issubclass(metaclass, Parameter):
            raise InvalidDeclarationArgumentError(
                f"{cls.__typename__} 'metaclass' for {_label(name)} must be a parameter class",
                title="invalid parameter metaclass",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="pass Parameter or a subclass of it",
                parameter=coalesce(name),
                value=metaclass,
            )
        return metaclass(name, **metadata)

    @property
    def default(self):
        """
        The declared default (or producer) as given; None when there is none.
        """
        return coalesce(self._default)

    @property
    def has_default(self):
        return self._default is not Unset

    def validate(self, value=Unset, /, position=Unset):
        """
        Validate one argument; see the module docstring for the algorithm.

        Parameters
        - value: the argument, or Unset when it was not supplied.
        - position: 1-based position for positional slots (messages only).

        Returns
        - the accepted (possibly defaulted or coerced) value, or Unset when the
          parameter is optional, has no default, and was not supplied.
        """
        if value is Unset:
            if self._default is not Unset:
                return self._default() if callable(self._default) else self._default
            if self._required:
                raise MissingRequiredParameterError(
                    "missing required %s" % _label(self._name, position),
                    title="missing required parameter",
                    code=FaultCode.MISSING_REQUIRED_PARAMETER,
                    hint=(
                        "pass a value for %r (for example: %s=...)" % (self._name, self._name)
                        if self._name is not Unset else
                        "pass at least %d positional arguments" % coalesce(position, 1)
                    ),
                    parameter=coalesce(self._name),
                    position=coalesce(position),
                    docs=getdoc(FaultCode.MISSING_REQUIRED_PARAMETER),
                )
            return Unset

        if self._does is not Unset and not self._does.check(value):
            raise RoleConstraintViolationError(
                "value %s for %s does not do %s" % (
                    reprlib.repr(value), _label(self._name, position), _typename(self._does)
                ),
                title="role constraint violation",
                code=FaultCode.ROLE_CONSTRAINT_VIOLATION,
                hint="pass a value that does %s" % _typename(self._does),
                parameter=coalesce(self._name),
                position=coalesce(position),
                value=value,
                docs=getdoc(FaultCode.ROLE_CONSTRAINT_VIOLATION),
            )

        if self._isa is not Unset and not self._isa.check(value):
            if not self._coerce:
                raise TypeConstraintViolationError(
                    "value %s for %s is not a valid %s" % (
                        reprlib.repr(value), _label(self._name, position), _typename(self._isa)
                    ),
                    title="type constraint violation",
                    code=FaultCode.TYPE_CONSTRAINT_VIOLATION,
                    hint="pass a value of type %s" % _typename(self._isa),
                    parameter=coalesce(self._name),
                    position=coalesce(position),
                    value=value,
                    docs=getdoc(FaultCode.TYPE_CONSTRAINT_VIOLATION),
                )
            value = self._coerce_value(value, position)

        return value

    def _coerce_value(self, value, position, /):
        def fault(reason):
            return CoercionFailureError(
                "value %s for %s %s" % (reprlib.repr(value), _label(self._name, position), reason),
                title="coercion failure",
                code=FaultCode.COERCION_FAILURE,
                hint="pass a value of type %s or one that can be coerced to it" % _typename(self._isa),
                parameter=coalesce(self._name),
                position=coalesce(position),
                value=value,
                docs=getdoc(FaultCode.COERCION_FAILURE),
            )

        try:
            coerced = self._isa.coerce(value)
        except Exception as exception:
            raise fault("could not be coerced to %s (%s)" % (_typename(self._isa), exception)) from exception

        if coerced is Unset:
            raise fault("has no coercion to %s" % _typename(self._isa))
        if not self._isa.check(coerced):
            raise fault("is not a valid %s even after coercion" % _typename(self._isa))
        return coerced

    def __replace__(self, **changes):
        fields = {
            "isa": self._isa,
            "does": self._does,
            "default": self._default,
            "required": self._required,
            "coerce": self._coerce,
        } | changes
        return type(self)(fields.pop("name", self._name), **fields)


__all__ = (
    "Parameter",
)
