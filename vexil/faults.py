"""
Vexil faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing condition.
- ParseError / ParseWarning: base types carrying a message plus read-only options
  (code, title, hint and context such as the offending flag or tokens). They know
  how to render themselves with rich and how to surface themselves (__trigger__).
- trigger(): central entry point to surface a fault with runtime options merged in.

Surfacing policy
- shell=False (library use): errors are raised, warnings go through warnings.warn.
  Deciding whether to terminate the process is left to the caller.
- shell=True (command-line use): faults are printed to standard error; errors
  then exit the process with the configured status (1 unless overridden).

Host overrides (read from __main__)
- __styles__: palette overrides for the renderers.
- __codes__:  FaultCode -> label, replacing the numeric code in headers.
- __prog__:   program name shown in headers.
"""
import copy
import sys
import warnings
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
    - values (2110x): VALIDATION_FAILURE, MISSING_FLAG_VALUE
    - requirements (2111x): MISSING_REQUIRED
    - tokens (2112x): UNKNOWN_TAIL_ARGUMENT, UNRECOGNIZED_ARGUMENTS
    - warnings (2210x): EMPTY_INLINE_VALUE, ALIAS_SHADOWED
    """
    # --- value errors ---
    VALIDATION_FAILURE          = 21101
    MISSING_FLAG_VALUE          = 21102

    # --- requirement errors ---
    MISSING_REQUIRED            = 21111

    # --- token errors ---
    UNKNOWN_TAIL_ARGUMENT       = 21121
    UNRECOGNIZED_ARGUMENTS      = 21122

    # --- warnings ---
    EMPTY_INLINE_VALUE          = 22101
    ALIAS_SHADOWED              = 22102

    def normalize(self):
        """
        return the host label for this code (see __codes__), or the numeric value.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_PALETTES = {
    "error": {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    },
    "warning": {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    },
}


def _render(fault, kind):
    """
    build the rich renderable shared by errors and warnings.

    layout
    - header: "[ prog — code | Title ]"
    - body:   message, then " → hint" when a hint is present
    - fancy:  the body goes into a panel titled by the header
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)

    styles = defaultdict(str, _PALETTES[kind] | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    parser = options.get("parser")
    prog = text(getattr(main, "__prog__", getattr(parser, "name", "vexil")), "prog-name")
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if code is not None else kind, "code"),
        " | ",
        text(str(options.get("title", kind)).title(), "title"),
        " ]"
    )
    body = [text(fault.message, "message")]
    if hint := options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class ParseError(Exception):
    """
    base type of every fatal parsing condition.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(self.options.get("status", 1))

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ValidationError(ParseError): ...
class MissingValueError(ParseError): ...
class MissingRequiredError(ParseError): ...
class UnknownTailError(ParseError): ...
class UnrecognizedArgumentsError(ParseError): ...


class ParseWarning(Warning):
    """
    base type of every non-fatal parsing condition.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            warnings.warn(self, stacklevel=5)
            return
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyInlineValueWarning(ParseWarning): ...
class AliasShadowWarning(ParseWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.

    typical options
    - parser, shell, fancy, colorful, status, plus any context the renderer or the
      caller may want (flag, tokens, missing, ...).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ParseError",
    "ValidationError",
    "MissingValueError",
    "MissingRequiredError",
    "UnknownTailError",
    "UnrecognizedArgumentsError",
    "ParseWarning",
    "EmptyInlineValueWarning",
    "AliasShadowWarning",
    "trigger",
)
