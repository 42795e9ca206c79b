"""
Signatory signatures: the argument contract of one method.

Overview
- Signature: abstract base. Concrete signatures implement
  • verify_arguments(*arguments): validate the raw call arguments and return
    them normalized (defaults filled, coercions applied).
  • arrange(verified): spread the normalized arguments into the tuple the
    method body receives after its receiver.

- Positional(*specs)
  • Raw arguments are matched to slots by index.
  • More arguments than slots is a TooManyArgumentsError.
  • A required slot at index i means at least i + 1 arguments must be given
    (unless the slot has a default).
  • Body receives (receiver, *values).

- Named(**specs)
  • Raw arguments are name/value pairs; the last occurrence of a name wins.
  • Odd-length input or a non-string name is a MalformedNamedArgumentsError.
  • Undeclared names are an UnknownParameterError (never passed through).
  • Body receives (receiver, options) where options maps names to values.

- Semi(*positional_specs, **named_specs)
  • The first len(positional) raw arguments are always positional, whatever
    they look like; every positional slot is required and cannot default.
  • The remaining arguments are verified as a Named signature.
  • Body receives (receiver, *values, options).

Keyword arguments given at the call site reach a signature through
collect(args, kwargs): Named and Semi turn them into trailing name/value pairs
(Semi only once every positional slot was supplied); Positional rejects them.

Optional parameters that were not supplied and have no default are left out:
Named/Semi omit the key; Positional omits trailing slots and fills skipped
slots that precede a supplied value with None so positions never shift.

Signatures are immutable after construction and safe to share across threads.

Quick example:
    >>> signature = Semi({"isa": "Str"}, excited={"isa": "Bool", "default": False})
    >>> signature.verify_arguments("Jens", "excited", True)
    (['Jens'], {'excited': True})
"""
import abc
import difflib
import itertools
import reprlib

from .faults import *
from .parameters import Parameter
from .utils import *


def _verify_positional(parameters, arguments, /):
    """
    Internal: validate arguments against positional slots (by index).
    """
    if len(arguments) > len(parameters):
        raise TooManyArgumentsError(
            "expected at most %d arguments but %d were given" % (len(parameters), len(arguments)),
            title="too many arguments",
            code=FaultCode.TOO_MANY_ARGUMENTS,
            hint=(
                "remove the arguments from %s position on" % ordinal(len(parameters) + 1)
                if parameters else
                "call it without arguments"
            ),
            position=len(parameters) + 1,
            value=arguments[len(parameters)],
            docs=getdoc(FaultCode.TOO_MANY_ARGUMENTS),
        )

    verified = []
    for index, parameter in enumerate(parameters):
        verified.append(parameter.validate(arguments[index] if index < len(arguments) else Unset, position=index + 1))

    # Trailing omissions are dropped so the body's own defaults apply.
    while verified and verified[-1] is Unset:
        verified.pop()
    return [coalesce(value) for value in verified]


def _verify_named(parameters, arguments, /, offset=0):
    """
    Internal: validate name/value pairs against named slots.

    offset is the number of arguments consumed before the pairs (used only
    to report positions relative to the whole call).
    """
    if len(arguments) % 2:
        raise MalformedNamedArgumentsError(
            "expected name/value pairs but got an odd number of arguments (%d)" % len(arguments),
            title="malformed named arguments",
            code=FaultCode.MALFORMED_NAMED_ARGUMENTS,
            hint="pass every named argument as name=value",
            position=offset + len(arguments),
            value=arguments[-1],
            docs=getdoc(FaultCode.MALFORMED_NAMED_ARGUMENTS),
        )

    names = arguments[::2]
    for index, name in enumerate(names):
        if not isinstance(name, str):
            raise MalformedNamedArgumentsError(
                "expected a parameter name at %s position but got %s" % (
                    ordinal(offset + 2 * index + 1), reprlib.repr(name)
                ),
                title="malformed named arguments",
                code=FaultCode.MALFORMED_NAMED_ARGUMENTS,
                hint="pass every named argument as name=value",
                position=offset + 2 * index + 1,
                value=name,
                docs=getdoc(FaultCode.MALFORMED_NAMED_ARGUMENTS),
            )

    # Duplicated names: the last occurrence wins.
    provided = dict(zip(names, arguments[1::2]))

    for name in provided:
        if name in parameters:
            continue
        suggestions = difflib.get_close_matches(name, parameters.keys(), 5)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = (
                "known parameters are: %s" % ", ".join(parameters)
                if parameters else
                "this method takes no named parameters"
            )
        raise UnknownParameterError(
            "unknown parameter %r" % name,
            title="unknown parameter",
            code=FaultCode.UNKNOWN_PARAMETER,
            hint=hint,
            parameter=name,
            suggestions=suggestions,
            value=provided[name],
            docs=getdoc(FaultCode.UNKNOWN_PARAMETER),
        )

    verified = {}
    for name, parameter in parameters.items():
        if (value := parameter.validate(provided.get(name, Unset))) is not Unset:
            verified[name] = value
    return verified


class Signature(metaclass=SpecType):
    """
    Abstract argument contract. Subclass it to implement new signature kinds.
    """

    def collect(self, args, kwargs, /):
        """
        Merge call-site positional and keyword arguments into the raw sequence.

        Keyword arguments become trailing name/value pairs. Signatures with
        positional slots override this so keywords never fill those slots.
        """
        return (*args, *itertools.chain.from_iterable(kwargs.items()))

    @abc.abstractmethod
    def verify_arguments(self, *arguments):
        """
        Validate raw arguments; raise a VerificationError on the first failure.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def arrange(self, verified, /):
        """
        Spread verified arguments into the body argument tuple.
        """
        raise NotImplementedError


class Positional(Signature):
    """
    Ordered, unnamed parameters.
    """

    __introspectable__ = (
        "parameters",
    )

    def __init__(self, *specs):
        self._parameters = tuple(map(Parameter.build, specs))

    def collect(self, args, kwargs, /):
        if kwargs:
            name, value = next(iter(kwargs.items()))
            raise UnknownParameterError(
                "unexpected named argument %r: this method only takes positional arguments" % name,
                title="unknown parameter",
                code=FaultCode.UNKNOWN_PARAMETER,
                hint="pass the value by position instead of as %s=..." % name,
                parameter=name,
                suggestions=[],
                value=value,
                docs=getdoc(FaultCode.UNKNOWN_PARAMETER),
            )
        return tuple(args)

    def verify_arguments(self, *arguments):
        return _verify_positional(self._parameters, arguments)

    def arrange(self, verified, /):
        return tuple(verified)


class Named(Signature):
    """
    Parameters addressed by name.
    """

    __introspectable__ = (
        "parameters",
    )

    def __init__(self, **specs):
        self._parameters = {name: Parameter.build(spec, name=name) for name, spec in specs.items()}

    def verify_arguments(self, *arguments):
        return _verify_named(self._parameters, arguments)

    def arrange(self, verified, /):
        return (verified,)


class Semi(Signature):
    """
    Leading required positional parameters followed by named parameters.
    """

    __introspectable__ = (
        "positional",
        "named",
    )

    def __init__(self, *positional, **named):
        self._positional = tuple(Parameter.build(spec, required=True) for spec in positional)

        for index, parameter in enumerate(self._positional):
            if parameter.has_default:
                raise InvalidDeclarationArgumentError(
                    "%s cannot have a default: positional parameters of a semi signature are always required" % (
                        "parameter %r" % parameter.name if parameter.name else
                        "parameter at %s position" % ordinal(index + 1)
                    ),
                    title="invalid parameter spec",
                    code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                    hint="remove the default or make it a named parameter",
                    position=index + 1,
                )

        self._named = {name: Parameter.build(spec, name=name) for name, spec in named.items()}

    def collect(self, args, kwargs, /):
        # Keyword pairs may only follow a complete positional run.
        if kwargs and len(args) < len(self._positional):
            self._positional[len(args)].validate(position=len(args) + 1)
        return super().collect(args, kwargs)

    def verify_arguments(self, *arguments):
        count = len(self._positional)
        return (
            _verify_positional(self._positional, arguments[:count]),
            _verify_named(self._named, arguments[count:], offset=count),
        )

    def arrange(self, verified, /):
        positional, named = verified
        return (*positional, named)


__all__ = (
    "Signature",
    "Positional",
    "Named",
    "Semi",
)
