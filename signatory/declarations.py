r"""
Signatory declaration API.

Entry points
- method(name, *parts, into=..., registry=...)
  • parts: exactly one signature, at most one body (callable) and at most one
    attribute mapping, in any order.
  • with into=SomeClass: installs the method right away and returns its
    MethodWrapper.
  • without into: returns a Declaration. Placed in a class body (directly or
    as a decorator) it installs itself when the class is created.
- attr(**attributes): method attributes (e.g. metaclass=..., shell=True).
- named(**specs), positional(*specs), semi(*specs, **named_specs): signatures.

Installation (Declaration.install)
1. The target must be a class and the declaration must have a body.
2. If the class provides default_method_attributes(name), it is called once
   and must return a mapping; explicit attributes override its entries.
3. attributes["metaclass"] selects the MethodWrapper subclass (default:
   MethodWrapper).
4. The body is renamed to "<Class>.<name>" for readable tracebacks.
5. The wrapper is built with metaclass.wrap_with_signature(...) and registered
   on the class through the registry.

Quick example:
    >>> class Greeter:
    ...     @method("hello", named(who={"isa": "Str", "required": True}))
    ...     def hello(self, args):
    ...         return "Hello %s!" % args["who"]
    ...
    ...     greet = method("greet", semi({"isa": "Str"}, excited={"isa": "Bool", "default": False}),
    ...                    lambda self, name, args: ("GREETINGS %s!" if args["excited"] else "Hi %s!") % name)
    ...
    >>> Greeter().hello(who="world")
    'Hello world!'
    >>> Greeter.greet("Jens", excited=True)
    'GREETINGS Jens!'
"""
import reprlib
import types
from collections.abc import Mapping

from .faults import *
from .methods import MethodWrapper, registry as _registry
from .signatures import Signature, Named, Positional, Semi
from .utils import *

DEFAULT_ATTRIBUTES_HOOK = "default_method_attributes"


def _sanitize_name(cls, name, /):
    if not isinstance(name, str) or not name.strip():
        raise InvalidDeclarationArgumentError(
            f"{cls.__typename__} requires a method name, not {reprlib.repr(name)}",
            title="missing method name",
            code=FaultCode.INVALID_DECLARATION_ARGUMENT,
            hint="pass the method name first, e.g. method('hello', named(...), body)",
            value=name,
        )
    elif not (name := name.strip()).isidentifier():
        raise InvalidDeclarationArgumentError(
            f"{cls.__typename__} method name {name!r} is not an identifier",
            title="invalid method name",
            code=FaultCode.INVALID_DECLARATION_ARGUMENT,
            hint="use an identifier such as 'hello'",
            value=name,
        )
    return name


class Declaration(metaclass=SpecType):
    """
    Structured method declaration: name, signature, body and attributes.

    A declaration is immutable; supplying the body through the decorator form
    returns a new declaration.
    """

    __introspectable__ = (
        "name",
        "signature",
        "body",
        "attributes",
    )

    def __init__(self, name, signature, /, body=Unset, attributes=Unset, registry=Unset):
        name = _sanitize_name(type(self), name)

        if not isinstance(signature, Signature):
            raise MissingSignatureError(
                f"method {name!r} has no signature",
                title="missing signature",
                code=FaultCode.MISSING_SIGNATURE,
                hint="add one of named(...), positional(...) or semi(...)",
                method=name,
            )
        if body is not Unset and not callable(body):
            raise InvalidDeclarationArgumentError(
                f"method {name!r} body must be callable",
                title="invalid method body",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="pass the function implementing the method",
                method=name,
                value=body,
            )
        if attributes is not Unset and not isinstance(attributes, Mapping):
            raise InvalidDeclarationArgumentError(
                f"method {name!r} attributes must be a mapping",
                title="invalid method attributes",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="build them with attr(...)",
                method=name,
                value=attributes,
            )

        self._name = name
        self._signature = signature
        self._body = body
        self._attributes = dict(coalesce(attributes, {}))
        self._registry = coalesce(registry, _registry)

    @classmethod
    def assemble(cls, name, parts, /, registry=Unset):
        """
        Classify free-form declaration parts into a Declaration.

        Raises
        - InvalidDeclarationArgumentError: a part that is neither a signature,
          a mapping nor a callable, or one of them given twice.
        - MissingSignatureError: no signature among the parts.
        """
        name = _sanitize_name(cls, name)
        found = {"signature": Unset, "attributes": Unset, "body": Unset}

        for part in parts:
            if isinstance(part, Signature):
                kind = "signature"
            elif isinstance(part, Mapping):
                kind = "attributes"
            elif callable(part):
                kind = "body"
            else:
                raise InvalidDeclarationArgumentError(
                    f"method {name!r} got an unexpected declaration part {reprlib.repr(part)}",
                    title="invalid declaration argument",
                    code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                    hint="pass a signature, an optional attr(...) mapping and a body",
                    method=name,
                    value=part,
                )
            if found[kind] is not Unset:
                raise InvalidDeclarationArgumentError(
                    f"method {name!r} got more than one {kind}",
                    title="invalid declaration argument",
                    code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                    hint=f"pass a single {kind}",
                    method=name,
                    value=part,
                )
            found[kind] = part

        return cls(name, found["signature"], body=found["body"], attributes=found["attributes"], registry=registry)

    def __call__(self, body, /):
        """
        Decorator form: supply the body and return the completed declaration.
        """
        if self._body is not Unset:
            raise InvalidDeclarationArgumentError(
                f"method {self._name!r} already has a body",
                title="invalid declaration argument",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="either pass the body to method(...) or use it as a decorator, not both",
                method=self._name,
                value=body,
            )
        return type(self)(self._name, self._signature, body=body, attributes=self._attributes, registry=self._registry)

    def __set_name__(self, owner, name):
        self.install(owner)
        # The method is registered under its declared name; drop the placeholder.
        if name != self._name and owner.__dict__.get(name) is self:
            delattr(owner, name)

    def install(self, target, /, registry=Unset):
        """
        Install the declared method on target and return its MethodWrapper.
        """
        registry = coalesce(registry, self._registry)

        if not isinstance(target, type):
            raise InvalidDeclarationArgumentError(
                f"method {self._name!r} can only be installed on a class, not {reprlib.repr(target)}",
                title="invalid method target",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="pass the class as 'into'",
                method=self._name,
                value=target,
            )

        qualname = f"{target.__qualname__}.{self._name}"

        if self._body is Unset:
            raise MissingBodyError(
                f"method {qualname!r} has no body",
                title="missing body",
                code=FaultCode.MISSING_BODY,
                hint="pass the function implementing the method, or use method(...) as a decorator",
                method=qualname,
            )

        defaults = {}
        if registry.has_method_hook(target, DEFAULT_ATTRIBUTES_HOOK):
            defaults = registry.get_method_hook(target, DEFAULT_ATTRIBUTES_HOOK)(self._name)
            if not isinstance(defaults, Mapping):
                raise InvalidDefaultAttributesShapeError(
                    f"{target.__qualname__}.{DEFAULT_ATTRIBUTES_HOOK}() returned {type(defaults).__name__}, not a mapping",
                    title="invalid default attributes",
                    code=FaultCode.INVALID_DEFAULT_ATTRIBUTES_SHAPE,
                    hint="return a mapping, e.g. attr(...)",
                    method=qualname,
                    value=defaults,
                )

        attributes = {**defaults, **self._attributes}

        metaclass = attributes.get("metaclass", MethodWrapper)
        if not isinstance(metaclass, type) or not issubclass(metaclass, MethodWrapper):
            raise InvalidDeclarationArgumentError(
                f"method {qualname!r} metaclass must be a method wrapper class",
                title="invalid method metaclass",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="pass MethodWrapper or a subclass of it",
                method=qualname,
                value=metaclass,
            )

        if isinstance(self._body, types.FunctionType):
            rename(self._body, self._name, qualname)

        wrapper = metaclass.wrap_with_signature(self._signature, self._body, name=self._name, attributes=attributes)
        registry.add_method(target, self._name, wrapper)
        return wrapper


def method(name, /, *parts, into=Unset, registry=Unset):
    """
    Declare a method with a checked signature.

    Usage
    - Immediate form (after the class exists):
        method("hello", named(who={"required": True}), body, into=Greeter)
    - Class body form:
        class Greeter:
            hello = method("hello", named(who={"required": True}), body)
    - Decorator form:
        class Greeter:
            @method("hello", named(who={"required": True}))
            def hello(self, args): ...

    Returns
    - MethodWrapper when `into` is given, otherwise a Declaration.
    """
    declaration = Declaration.assemble(name, parts, registry=registry)
    if into is Unset:
        return declaration
    return declaration.install(into)


def attr(attributes=(), /, **options):
    """
    Build a method attribute mapping (passed through unchanged).
    """
    return dict(attributes) | options


def named(**specs):
    """
    Build a Named signature: named(who={"isa": "Str", "required": True}, ...).
    """
    return Named(**specs)


def positional(*specs):
    """
    Build a Positional signature: positional({"isa": "Str", "required": True}, ...).
    """
    return Positional(*specs)


def semi(*specs, **named_specs):
    """
    Build a Semi signature: semi({"isa": "Str"}, excited={"default": False}).
    """
    return Semi(*specs, **named_specs)


__all__ = (
    # Classes
    "Declaration",

    # Declaration helpers
    "method",
    "attr",
    "named",
    "positional",
    "semi",

    # Constants
    "DEFAULT_ATTRIBUTES_HOOK",
)
