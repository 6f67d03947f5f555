"""
Serialine faults: every error and warning the tokenizer, the engine and the
codecs can report, and how they reach the user.

Each fault carries a one-sentence message plus options: title, code, hint,
docs, context (line, spec, index, type, tokens...) and the runtime flags
shell/fancy/colorful merged in by trigger().

Surfacing (trigger)
- library use (shell=False): errors are raised, warnings go to warnings.warn.
- shell use (shell=True): both are printed with rich on stderr; errors then
  exit with status 1.

Host hooks, read from the __main__ module when present
- __prog__:   program name shown in the header.
- __codes__:  {FaultCode: label} replacing the numeric ids.
- __docs__:   {FaultCode: text} appended below the hint.
- __styles__: {style-name: rich style} overriding the palettes.
"""
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, UnsetType

console = Console(stderr=True)


def _host(name, default):
    return getattr(__import__("__main__"), name, default)


class FaultCode(IntEnum):
    """
    Stable numeric identifiers, 112xx for errors and 122xx for warnings.
    """
    # tokenizing
    MALFORMED_QUOTING = 11201

    # matching
    MISSING_SCALAR_VALUE = 11211
    MISSING_REQUIRED_SPEC = 11221

    # values
    UNKNOWN_VALUE_TYPE = 11231
    INVALID_VALUE = 11232

    # warnings
    EMPTY_INLINE_VALUE = 12211

    def normalize(self):
        """
        The label shown to users: __main__.__codes__[self], or the number.
        """
        return str(_host("__codes__", {}).get(self, self.value))


class _Fault:
    """
    Behavior shared by SerializerException and SerializerWarning.
    """
    PALETTE = {}
    TITLE_STYLE = MESSAGE_STYLE = ""

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | UnsetType)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __replace__(self, *positional, **overrides):
        assert not positional, "__replace__() takes keyword arguments only"
        return type(self)(self.message, **(dict(self.options) | overrides))

    def __rich__(self):
        options = self.options
        colorful = options.get("colorful", True)
        styles = defaultdict(str, self.PALETTE | _host("__styles__", {}))

        def paint(fragment, style):
            return Text(str(fragment), styles[style] if colorful else "")

        code = options.get("code")
        header = Text.assemble(
            "[ ",
            paint(_host("__prog__", options.get("prog", "serialine")), "prog-name"),
            " — ",
            paint(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
            " | ",
            paint(str(options.get("title", type(self).__name__)).title(), self.TITLE_STYLE),
            " ]",
        )

        body = [paint(self, self.MESSAGE_STYLE)]
        if hint := options.get("hint"):
            body.append(Text.assemble(paint(" → ", "hint-arrow"), paint(hint, "hint")))
        if docs := options.get("docs"):
            body.append(paint(docs, "docs"))

        if options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)


class SerializerException(_Fault, Exception):
    """
    Base of all serialine errors.
    """
    PALETTE = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "error-title": "bold #FF4DA6",
        "error-message": "#C8C8D0",
        "hint-arrow": "dim #9CE19C",
        "hint": "italic #9CE19C",
        "docs": "dim",
    }
    TITLE_STYLE = "error-title"
    MESSAGE_STYLE = "error-message"

    def __trigger__(self):
        if self.options.get("shell", False):
            console.print(self)
            sys.exit(1)
        raise self from None


class MalformedQuotingError(SerializerException): ...
class MissingScalarValueError(SerializerException): ...
class MissingRequiredSpecError(SerializerException): ...
class UnknownValueTypeError(SerializerException): ...
class InvalidValueError(SerializerException): ...


class SerializerWarning(_Fault, Warning):
    """
    Base of all serialine warnings; rendered like errors but never fatal.
    """
    PALETTE = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "warning-title": "bold #FFC2E0",
        "warning-message": "#D6D6DE",
        "hint-arrow": "dim #B8EFAF",
        "hint": "italic #B8EFAF",
        "docs": "dim",
    }
    TITLE_STYLE = "warning-title"
    MESSAGE_STYLE = "warning-message"

    def __trigger__(self):
        if self.options.get("shell", False):
            console.print(self)
        else:
            # point at the outermost caller
            warnings.warn(self, stacklevel=len(inspect.stack()))


class EmptyInlineValueWarning(SerializerWarning): ...


def trigger(fault, /, **options):
    """
    Merge options into fault and surface it (raise, warn, or print).

    Any object with __replace__(**options) and __trigger__() is accepted;
    anything else is a TypeError.
    """
    if not (callable(getattr(fault, "__replace__", None)) and callable(getattr(fault, "__trigger__", None))):
        raise TypeError("trigger() argument must define __replace__ and __trigger__")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    Host documentation for a fault code (__main__.__docs__), or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a FaultCode")
    return _host("__docs__", {}).get(code)


__all__ = (
    "SerializerException",
    "MalformedQuotingError",
    "MissingScalarValueError",
    "MissingRequiredSpecError",
    "UnknownValueTypeError",
    "InvalidValueError",
    "SerializerWarning",
    "EmptyInlineValueWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
