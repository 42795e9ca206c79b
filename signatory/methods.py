"""
Signatory method wrappers and the class registry.

What this module provides
- MethodWrapper: binds a Signature to a body and enforces "verify, then
  dispatch" on every call.
  • wrapper(receiver, *args, **kwargs): signature.collect(args, kwargs) builds
    the raw sequence (keywords become trailing name/value pairs for named
    slots only), the signature verifies it, and only then
    body(receiver, *signature.arrange(verified)) runs.
  • Verification faults never reach the body; they are surfaced through
    MethodWrapper.trigger(...) with the method name attached.
  • Wrappers are descriptors: accessed on an instance they bind to it, accessed
    on the class they bind to the class (class-method style calls).
  • Wrappers keep no per-call state; one wrapper may be called concurrently.

- ClassRegistry: the narrow interface used to install wrappers on classes.
  • add_method(target, name, callable)
  • has_method_hook(target, hook) / get_method_hook(target, hook)

Method attributes understood by MethodWrapper
- shell: render faults with rich and exit(1) instead of raising.
- fancy: render faults inside a panel (shell mode).
- colorful: colorize rendered faults (shell mode).
Any other attribute is kept for introspection.
"""
import inspect
import types

from .faults import *
from .signatures import Signature
from .utils import *


class MethodWrapper(metaclass=SpecType):
    """
    Callable produced by binding a signature to a method body.

    Build instances with MethodWrapper.wrap_with_signature(...); subclasses can
    be selected per method through the 'metaclass' method attribute.
    """

    __introspectable__ = (
        "name",
        "signature",
        "body",
        "attributes",
    )
    __displayable__ = (
        "name",
        "signature",
        "attributes",
    )

    def __init__(self, signature, body, /, name=Unset, attributes=Unset):
        if not isinstance(signature, Signature):
            raise MissingSignatureError(
                f"{type(self).__typename__} requires a signature, not {type(signature).__name__}",
                title="missing signature",
                code=FaultCode.MISSING_SIGNATURE,
                hint="build one with named(...), positional(...) or semi(...)",
                value=signature,
            )
        if not callable(body):
            raise MissingBodyError(
                f"{type(self).__typename__} requires a callable body, not {type(body).__name__}",
                title="missing body",
                code=FaultCode.MISSING_BODY,
                hint="pass the function implementing the method",
                value=body,
            )
        self._signature = signature
        self._body = body
        self._name = coalesce(name, getattr(body, "__name__", type(self).__typename__))
        self._attributes = dict(coalesce(attributes, {}))

        self.__wrapped__ = body
        self.__doc__ = getattr(body, "__doc__", None)
        self.__name__ = self._name
        self.__qualname__ = getattr(body, "__qualname__", self._name)

    @classmethod
    def wrap_with_signature(cls, signature, body, /, name=Unset, attributes=Unset):
        """
        Build a wrapper enforcing `signature` in front of `body`.

        Parameters
        - signature: Signature instance (Named, Positional, Semi or custom).
        - body: callable invoked as body(receiver, *arranged_arguments).
        - name: method name (defaults to the body's __name__).
        - attributes: method attributes (see module docstring).
        """
        return cls(signature, body, name=name, attributes=attributes)

    def __call__(self, receiver, /, *args, **kwargs):
        try:
            verified = self._signature.verify_arguments(*self._signature.collect(args, kwargs))
        except VerificationError as fault:
            return self.trigger(fault)
        return self._body(receiver, *self._signature.arrange(verified))

    def __get__(self, instance, owner=None):
        if instance is None:
            if owner is None:
                return self
            return types.MethodType(self, owner)
        return types.MethodType(self, instance)

    def trigger(self, fault, /, **options):
        """
        Surface a fault raised while calling this method.

        The fault is enriched with the method's qualified name and the
        wrapper's shell/fancy/colorful attributes before being handed to
        signatory.faults.trigger: it is raised, or rendered and the process
        exits when the method runs in shell mode.
        """
        trigger(fault, **{
            "method": self.__qualname__,
            "shell": bool(self._attributes.get("shell", False)),
            "fancy": bool(self._attributes.get("fancy", False)),
            "colorful": bool(self._attributes.get("colorful", False)),
        } | options)


class ClassRegistry:
    """
    Installs wrappers on ordinary Python classes.

    Hooks are looked up with getattr, so inherited hooks apply. A hook defined
    as a plain function is bound to the class; classmethods and staticmethods
    are used as they are.
    """

    def add_method(self, target, name, callable, /):
        if not isinstance(target, type):
            raise InvalidDeclarationArgumentError(
                "cannot add method %r to %r: the target must be a class" % (name, target),
                title="invalid method target",
                code=FaultCode.INVALID_DECLARATION_ARGUMENT,
                hint="declare methods on classes (pass the class as 'into')",
                value=target,
            )
        setattr(target, name, callable)

    def has_method_hook(self, target, hook, /):
        return callable(getattr(target, hook, None))

    def get_method_hook(self, target, hook, /):
        function = getattr(target, hook)
        # Plain functions are bound to the class; staticmethods also read as functions.
        if isinstance(inspect.getattr_static(target, hook), types.FunctionType):
            return types.MethodType(function, target)
        return function


registry = ClassRegistry()
"""
Default registry used by declarations when none is given.
"""


__all__ = (
    "MethodWrapper",
    "ClassRegistry",
    "registry",
)
