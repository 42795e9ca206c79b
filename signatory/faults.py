"""
Signatory faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault. Codes are
  grouped by phase (declaration vs. call) to keep logs/searches predictable.
- SignatureException: base type that carries message + options and knows how
  to render itself in a friendly, lowercased, and actionable way.
- DeclarationError / VerificationError: the two phases. Both are TypeErrors,
  so callers that already guard calls with `except TypeError` keep working.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Phases
- Declaration faults are raised while a method is being declared (building a
  parameter, a signature, or installing a wrapper on a class).
- Verification faults are raised while a wrapped method verifies its call
  arguments; the method body never runs when one is raised.

Integration
- Signatures and parameters raise faults directly.
- Method wrappers catch verification faults, enrich them with the method name
  and their surfacing options, and hand them to trigger(fault, **ctx).
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - declaration (2110x)
      • INVALID_DECLARATION_ARGUMENT, MISSING_BODY, MISSING_SIGNATURE,
        INVALID_DEFAULT_ATTRIBUTES_SHAPE
    - call-time verification (2210x / 2211x)
      • MISSING_REQUIRED_PARAMETER, TYPE_CONSTRAINT_VIOLATION,
        ROLE_CONSTRAINT_VIOLATION, COERCION_FAILURE
      • TOO_MANY_ARGUMENTS, UNKNOWN_PARAMETER, MALFORMED_NAMED_ARGUMENTS

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- declaration errors (21xxx) ---
    INVALID_DECLARATION_ARGUMENT     = 21101
    MISSING_BODY                     = 21102
    MISSING_SIGNATURE                = 21103
    INVALID_DEFAULT_ATTRIBUTES_SHAPE = 21104

    # --- parameter errors (22xxx) ---
    MISSING_REQUIRED_PARAMETER       = 22101
    TYPE_CONSTRAINT_VIOLATION        = 22102
    ROLE_CONSTRAINT_VIOLATION        = 22103
    COERCION_FAILURE                 = 22104

    # --- argument list errors (22xxx) ---
    TOO_MANY_ARGUMENTS               = 22111
    UNKNOWN_PARAMETER                = 22112
    MALFORMED_NAMED_ARGUMENTS        = 22113

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SignatureException(Exception):
    """
    base fault: a message plus read-only rendering/context options.

    common options
    - title, code, hint, docs: presentation (see __rich__).
    - method: qualified name of the method whose call failed.
    - parameter, position, value: what failed and with which value.
    - shell, fancy, colorful: surfacing switches (see __trigger__).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "method-name": "bold #E6E6F0",  # near-white method name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        code = self.options.get("code", Unset)

        header = Text.assemble(
            "[ ",
            text(self.options.get("method", type(self).__name__), styler("method-name")),
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "-", styler("code")),
            " | ",
            text(str(self.options.get("title", "fault")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))

        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class DeclarationError(SignatureException, TypeError): ...
class InvalidDeclarationArgumentError(DeclarationError): ...
class MissingBodyError(DeclarationError): ...
class MissingSignatureError(DeclarationError): ...
class InvalidDefaultAttributesShapeError(DeclarationError): ...


class VerificationError(SignatureException, TypeError): ...
class MissingRequiredParameterError(VerificationError): ...
class TypeConstraintViolationError(VerificationError): ...
class RoleConstraintViolationError(VerificationError): ...
class CoercionFailureError(VerificationError): ...
class TooManyArgumentsError(VerificationError): ...
class UnknownParameterError(VerificationError): ...
class MalformedNamedArgumentsError(VerificationError): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see SignatureException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised.

    typical options
    - method, shell, fancy, colorful, title, code, hint, docs, and any other
      context the reporter may want to show (e.g., parameter/position/value).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "SignatureException",
    "DeclarationError",
    "InvalidDeclarationArgumentError",
    "MissingBodyError",
    "MissingSignatureError",
    "InvalidDefaultAttributesShapeError",
    "VerificationError",
    "MissingRequiredParameterError",
    "TypeConstraintViolationError",
    "RoleConstraintViolationError",
    "CoercionFailureError",
    "TooManyArgumentsError",
    "UnknownParameterError",
    "MalformedNamedArgumentsError",
    "FaultCode",
    "trigger",
    "getdoc",
)
