"""
Vexil value coercers.

Every coercer maps one raw command-line token to a typed value and is total:
it never raises. When a token cannot be converted, the coercer returns its
`default` argument, which itself falls back to the raw input. The parser can
therefore treat "conversion failed" as a silent pass-through and leave the
judgement to the option's `test` validator.

Built-in type names
- "string":  str(value)
- "number":  lenient numeric coercion; NaN when the text is not numeric
- "integer": "0" or an unsigned digit run without leading zeros, else the raw text
- "boolean": true/1 -> True, false/0 -> False (case-insensitive), else the raw text
- "json":    strict JSON document, else the raw text
- "csv":     comma separated list of strings

TRANSFORMS and TESTS are the read-only default tables a parser starts from;
parsers merge their own `transforms=` / `tests=` over them.
"""
import json
import math
import re
from types import MappingProxyType

from .utils import *

_RADIX = re.compile(r"[+-]?0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?P<fraction>\.[0-9]*)?|(?P<leading>\.[0-9]+))(?P<exponent>[eE][+-]?[0-9]+)?")
_INFINITY = re.compile(r"[+-]?Infinity")
_INTEGER = re.compile(r"[0-9]|[1-9][0-9]+")


def parse_string(value, default=Unset, /):
    """
    Identity coercion (the value is rendered with str()).
    """
    return str(value)


def parse_number(value, default=Unset, /):
    """
    Coerce a token to int or float.

    Accepted forms
    - surrounding whitespace is ignored and an empty token is 0
    - decimal with optional fraction and exponent ("15", "-3.5", ".5", "1e3")
    - radix prefixes ("0x1f", "0o17", "0b101")
    - "Infinity" / "-Infinity"

    Integral literals (no fraction, no exponent) produce int, everything else float.
    Non-numeric text produces `default`, NaN when no default is given.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float):
        return value

    text = str(value).strip()
    if not text:
        return 0
    if _RADIX.fullmatch(text):
        return int(text, 0)
    if match := _DECIMAL.fullmatch(text):
        if match["fraction"] is None and match["leading"] is None and match["exponent"] is None:
            return int(text)
        return float(text)
    if _INFINITY.fullmatch(text):
        return float(text.replace("Infinity", "inf"))
    return coalesce(default, math.nan)


def parse_integer(value, default=Unset, /):
    """
    Coerce an unsigned decimal digit run to int.

    "0" and "42" convert; "042", "-1", "1.5" and "abc" do not and return
    `default` (the raw value when no default is given).
    """
    if isinstance(value, str) and _INTEGER.fullmatch(value):
        return int(value)
    return coalesce(default, value)


def parse_boolean(value, default=Unset, /):
    """
    Coerce "true"/"1" to True and "false"/"0" to False (case-insensitive).

    bool values pass through unchanged; anything else returns `default`
    (the raw value when no default is given).
    """
    if isinstance(value, bool):
        return value
    match str(value).lower():
        case "true" | "1":
            return True
        case "false" | "0":
            return False
    return coalesce(default, value)


def _reject_constant(constant):
    raise ValueError("%s is not valid JSON" % constant)


def parse_json(value, default=Unset, /):
    """
    Decode a strict JSON document (NaN/Infinity literals are rejected).
    """
    try:
        return json.loads(value, parse_constant=_reject_constant)
    except (TypeError, ValueError):
        return coalesce(default, value)


def parse_csv(value, default=Unset, /):
    """
    Split a token on commas.
    """
    try:
        return value.split(",")
    except AttributeError:
        return coalesce(default, value)


def is_number(value):
    """
    Default validator for "number" options: anything but NaN passes.
    """
    return not (isinstance(value, float) and math.isnan(value))


TRANSFORMS = MappingProxyType({
    "string": parse_string,
    "number": parse_number,
    "integer": parse_integer,
    "boolean": parse_boolean,
    "json": parse_json,
    "csv": parse_csv,
})

TESTS = MappingProxyType({
    "number": is_number,
})


__all__ = (
    "parse_string",
    "parse_number",
    "parse_integer",
    "parse_boolean",
    "parse_json",
    "parse_csv",
    "is_number",
    "TRANSFORMS",
    "TESTS",
)
