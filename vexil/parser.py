"""
Vexil parser.

A Parser owns a Registry built from a declarative schema plus the runtime
configuration (default type, transform/test tables, help/version metadata and
the fault surfacing flags). Each parse() call works on its own token list,
claimed set and ParseResult, so one parser serves any number of calls.

Stages of one parse() call
1. pass-through split at the first literal "--"
2. sub-commands: the unbroken prefix of non-flag tokens fills the sub-command slots
   (only when the first token is a non-empty word)
3. flags: every registered alias, longest first, claims its first matching token
4. help/version: when a built-in page flag matched, the page is shown and parsing stops
5. tail: leading non-flag tokens fill the tail slots ("rest" absorbs the remainder)
6. requirements: every missing required slot or flag is reported in one error
7. defaults: unclaimed options receive a copy of their declared default (untransformed)
8. leftovers: any token still unclaimed is an error

Example
    >>> parser = Parser({"number": {"type": "number", "required": True, "alias": "n"}})
    >>> parser.parse(["-n", "15"]).options
    {'number': 15}
"""
import copy
import importlib.metadata
import os
import shlex
import sys
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from rich.console import Console

from .coercers import TESTS, TRANSFORMS, parse_string
from .faults import *
from .registry import Registry
from .render import render_help, render_version
from .specs import *
from .specs import SpecType
from .tokens import *
from .utils import *

_LITERALS = frozenset(("true", "false", "1", "0"))

_BUILTINS = MappingProxyType({
    "help": Option(type="boolean", alias=("h", "?"), descr="show this help message and exit"),
    "version": Option(type="boolean", descr="show the version and exit"),
})

_PAGES = ("help", "version")


class ParseResult(metaclass=SpecType):
    """
    Outcome of one parse() call.

    - options:     name -> value for every matched flag, filled slot and applied default
    - passthrough: tokens after "--" (tuple), or None when there was no "--"
    - unparsed:    tokens left when parsing stopped
    - displayed:   "help" or "version" when a page was shown instead of finishing, else None
    """

    __introspectable__ = (
        "options",
        "passthrough",
        "unparsed",
        "displayed",
    )

    def __init__(self, options=None, passthrough=None, unparsed=(), displayed=None):
        self._options = dict(options or {})
        self._passthrough = passthrough
        self._unparsed = list(unparsed)
        self._displayed = displayed

    def __getitem__(self, name):
        return self._options[name]

    def __contains__(self, name):
        return name in self._options

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)

    def get(self, name, default=None, /):
        return self._options.get(name, default)


class Parser:
    """
    Command-line parser bound to a schema.

    Parameters
    - schema: mapping of option name -> Option (or a mapping of Option fields), plus
      the reserved "__subcommands" / "__tail" slot lists.
    - name / version / descr / usage / epilog: help and version page contents.
      name falls back to __main__.__prog__, then to the basename of sys.argv[0];
      version falls back to the installed distribution version of name, then "0.0.0".
    - type: type name used for specs that leave `type` unset ("string").
    - transforms / tests: name -> callable tables merged over the built-in ones;
      a new name registers a new type.
    - builtins: the page options registered before the schema ("help", "version").
      Pass {} (or map a name to None) to disable them.
    - shell / fancy / colorful / status: fault surfacing (see vexil.faults).
    - console: rich Console the help and version pages are printed to.
    """

    def __init__(
            self,
            schema=None,
            /,
            *,
            name=Unset,
            version=Unset,
            descr=Unset,
            usage=Unset,
            epilog=Unset,
            type="string",
            transforms=None,
            tests=None,
            builtins=Unset,
            shell=False,
            fancy=False,
            colorful=True,
            status=1,
            console=None,
    ):
        for key, table in (("transforms", transforms), ("tests", tests)):
            if table is None:
                continue
            if not isinstance(table, Mapping):
                raise TypeError(f"parser {key!r} must be a mapping")
            for item, function in table.items():
                if not isinstance(item, str) or not callable(function):
                    raise TypeError(f"parser {key!r} must map type names to callables")

        self._transforms = dict(TRANSFORMS) | dict(transforms or {})
        self._tests = dict(TESTS) | dict(tests or {})

        if not isinstance(type, str) or type not in self._transforms:
            raise ValueError(f"parser 'type' must name a registered transform, not {type!r}")
        self._type = type

        for key, object in (("descr", descr), ("usage", usage), ("epilog", epilog)):
            if not isinstance(object, str | Unset):
                raise TypeError(f"parser {key!r} must be a string")

        self._name = coalesce(name, getattr(__import__("__main__"), "__prog__", os.path.basename(sys.argv[0])))
        self._version = coalesce(version) or _installed_version(self._name)
        self._descr = coalesce(descr)
        self._usage = coalesce(usage)
        self._epilog = coalesce(epilog)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._status = status
        self._console = console

        self._registry = Registry()
        builtins = dict(coalesce(builtins, _BUILTINS))
        self._pages = set()
        self.register(builtins)
        self._pages = {key for key in _PAGES if builtins.get(key) is not None}
        if schema is not None:
            self.register(schema)

    name = mirror("name")
    version = mirror("version")
    descr = mirror("descr")
    usage = mirror("usage")
    epilog = mirror("epilog")
    type = mirror("type")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    status = mirror("status")

    @property
    def registry(self):
        return self._registry

    @property
    def transforms(self):
        return MappingProxyType(self._transforms)

    @property
    def tests(self):
        return MappingProxyType(self._tests)

    def __repr__(self):
        return f"parser(name={self.name!r}, version={self.version!r}, options={list(self._registry.options)!r})"

    def typeof(self, spec, /):
        """
        Resolved type name of a spec (its own type, or the parser default).
        """
        return coalesce(spec.type, self._type)

    def takes_value(self, option, /):
        return self.typeof(option) != "boolean"

    def register(self, schema, /):
        """
        Merge `schema` into the registry.

        Every spec must resolve to a known type unless it brings its own transform.
        Aliases that end up pointing to another option are reported as
        AliasShadowWarning.
        """
        if not isinstance(schema, Mapping):
            raise TypeError("register() argument must be a mapping")

        shadowed = self._registry.register(schema)
        # A schema entry named like a page option turns it into a plain option.
        self._pages -= schema.keys()

        specs = (*self._registry.options.values(), *self._registry.subcommands, *self._registry.tail)
        for spec in specs:
            if spec.transform is Unset and self.typeof(spec) not in self._transforms:
                raise ValueError(f"{type(spec).__typename__} {spec.name!r} has an unknown type {self.typeof(spec)!r}")

        for alias, ignored, owner in shadowed:
            self._fault(AliasShadowWarning(
                "alias %r of option %r is shadowed by option %r" % (alias, ignored, owner),
                code=FaultCode.ALIAS_SHADOWED,
                title="alias shadowed",
                hint="give option %r a distinct alias" % ignored,
                alias=alias,
                ignored=ignored,
                owner=owner,
            ))

    def parse(self, tokens=Unset, /, schema=Unset):
        """
        Parse `tokens` and return a ParseResult.

        tokens
        - Unset: sys.argv[1:]
        - str:   split with shlex.split
        - Iterable[str]: used as-is; an empty string never starts the sub-commands
          or the tail and is never taken as a value

        schema, when given, is merged with register() first.

        Raises a ParseError subclass on the first fatal condition (shell=False);
        in shell mode the fault is printed and the process exits with `status`.
        """
        if schema is not Unset:
            self.register(schema)

        tokens, passthrough = split_passthrough(_tokenize(tokens))
        options = {}
        claimed = set()

        tokens = self._extract_subcommands(tokens, options)
        tokens = self._match_flags(tokens, options, claimed)

        for page in _PAGES:
            if page in self._pages and options.get(page) is True:
                return self._display(page, ParseResult(options, passthrough, tokens, page))

        tokens = self._extract_tail(tokens, options)
        self._enforce_required(options)

        for name, option in self._registry.options.items():
            if name not in claimed and option.default is not Unset:
                options[name] = copy.deepcopy(option.default)

        result = ParseResult(options, passthrough, tokens)
        if tokens:
            self._fault(UnrecognizedArgumentsError(
                "unrecognized argument%s: %s" % ("s" if len(tokens) > 1 else "", " ".join(map(repr, tokens))),
                code=FaultCode.UNRECOGNIZED_ARGUMENTS,
                title="unrecognized arguments",
                hint=self._hint("remove them"),
                tokens=tuple(tokens),
            ))
        return result

    def print_help(self):
        (self._console or Console()).print(render_help(self))

    def print_version(self):
        (self._console or Console()).print(render_version(self))

    def _display(self, page, result):
        getattr(self, "print_" + page)()
        if self._shell:
            sys.exit(0)
        return result

    def _fault(self, fault, /):
        trigger(
            fault,
            parser=self,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            status=self._status,
        )

    def _hint(self, advice):
        if "help" in self._pages:
            return "%s, run '%s --help' for usage" % (advice, self._name)
        return advice

    def _apply(self, spec, label, value):
        """
        Coerce `value` with the spec's transform (or its type's coercer), then test it.
        """
        transform = coalesce(spec.transform, self._transforms.get(self.typeof(spec), parse_string))
        return self._check(spec, label, transform(value))

    def _check(self, spec, label, value):
        test = coalesce(spec.test, self._tests.get(self.typeof(spec), Unset))
        if test is Unset:
            return value

        outcome = test(value)
        if outcome and not isinstance(outcome, str):
            return value

        if not isinstance(outcome, str) or not outcome:
            outcome = "%s received an invalid value %r (rejected by %s)" % (
                label, value, getattr(test, "__qualname__", repr(test))
            )
        self._fault(ValidationError(
            outcome,
            code=FaultCode.VALIDATION_FAILURE,
            title="validation failure",
            hint=self._hint("check the value"),
            argument=spec.name,
            value=value,
        ))

    def _extract_subcommands(self, tokens, options):
        slots = self._registry.subcommands
        index = 0
        if not tokens or not tokens[0]:
            return tokens
        while index < min(len(slots), len(tokens)) and not looks_like_flag(tokens[index]):
            slot = slots[index]
            options[slot.name] = self._apply(slot, "subcommand %r" % slot.name, tokens[index])
            index += 1
        return tokens[index:]

    def _classify(self, token, alias, option):
        if len(alias) > 1:
            return match_long(token, alias, negatable=not self.takes_value(option))

        def takes_value(char):
            return char in self._registry.aliases and self.takes_value(self._registry.resolve(char))

        return match_short(token, alias, takes_value)

    def _match_flags(self, tokens, options, claimed):
        for alias in self._registry.flags:
            if not tokens:
                break

            name = self._registry.aliases[alias]
            if name in claimed:
                continue
            option = self._registry.options[name]

            for index, token in enumerate(tokens):
                if looks_like_flag(token) and (match := self._classify(token, alias, option)):
                    break
            else:
                continue

            claimed.add(name)
            flag = ("--" if len(alias) > 1 else "-") + alias
            rest = tokens[index + 1:]
            value = match.value
            # Presence and negation store a bare bool, only the test applies.
            bare = False

            if value == "":
                self._fault(EmptyInlineValueWarning(
                    "flag %r was given an empty inline value" % flag,
                    code=FaultCode.EMPTY_INLINE_VALUE,
                    title="empty inline value",
                    hint="drop the '=' or provide a value",
                    flag=flag,
                ))
                if not self.takes_value(option):
                    value, bare = True, True
            elif value is None and not self.takes_value(option):
                if match.lookahead and rest and rest[0].lower() in _LITERALS:
                    value = rest.pop(0)
                else:
                    value, bare = not match.negated, True
            elif value is None:
                if match.lookahead and rest and rest[0] and not looks_like_flag(rest[0]):
                    value = rest.pop(0)
                else:
                    self._fault(MissingValueError(
                        "flag %r expects a value <%s>" % (flag, coalesce(option.metavar, self.typeof(option))),
                        code=FaultCode.MISSING_FLAG_VALUE,
                        title="missing flag value",
                        hint="write '%s <%s>' or '%s=<%s>'" % (
                            flag, coalesce(option.metavar, self.typeof(option)),
                            flag, coalesce(option.metavar, self.typeof(option)),
                        ),
                        flag=flag,
                    ))

            tokens = tokens[:index] + ([match.pushback] if match.pushback else []) + rest
            if bare:
                options[name] = self._check(option, "flag %r" % flag, value)
            else:
                options[name] = self._apply(option, "flag %r" % flag, value)
        return tokens

    def _extract_tail(self, tokens, options):
        slots = self._registry.tail
        if not slots or not tokens or not tokens[0]:
            return tokens

        position = 0
        while tokens and not looks_like_flag(tokens[0]):
            if position >= len(slots):
                self._fault(UnknownTailError(
                    "%r is not a defined tail argument (defined: %s)" % (
                        tokens[0], ", ".join(slot.name for slot in slots)
                    ),
                    code=FaultCode.UNKNOWN_TAIL_ARGUMENT,
                    title="unknown tail argument",
                    hint=self._hint("remove the extra argument"),
                    token=tokens[0],
                ))
            slot = slots[position]
            label = "tail argument %r" % slot.name
            if slot.rest:
                count = next((index for index, token in enumerate(tokens) if looks_like_flag(token)), len(tokens))
                options[slot.name] = [self._apply(slot, label, token) for token in tokens[:count]]
                return tokens[count:]
            options[slot.name] = self._apply(slot, label, tokens.pop(0))
            position += 1
        return tokens

    def _enforce_required(self, options):
        missing = []
        for slot in self._registry.subcommands:
            if slot.required and slot.name not in options:
                missing.append((slot.name, "subcommand <%s>" % coalesce(slot.metavar, slot.name)))
        for name in self._registry.required:
            if name not in options:
                option = self._registry.options[name]
                label = self._registry.labels[name]
                if self.takes_value(option):
                    label += " <%s>" % coalesce(option.metavar, self.typeof(option))
                missing.append((name, label))
        for slot in self._registry.tail:
            if slot.required and slot.name not in options:
                missing.append((slot.name, "tail argument <%s>" % coalesce(slot.metavar, slot.name)))

        if missing:
            self._fault(MissingRequiredError(
                "missing required argument%s: %s" % (
                    "s" if len(missing) > 1 else "", "; ".join(label for _, label in missing)
                ),
                code=FaultCode.MISSING_REQUIRED,
                title="missing required arguments",
                hint=self._hint("provide every required argument"),
                missing=tuple(name for name, _ in missing),
            ))


def _tokenize(tokens):
    if tokens is Unset:
        return sys.argv[1:]
    if isinstance(tokens, str):
        return shlex.split(tokens)
    if isinstance(tokens, Iterable):
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() tokens must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() tokens must be a string or an iterable of strings")


def _installed_version(name):
    try:
        return importlib.metadata.version(name)
    except (importlib.metadata.PackageNotFoundError, ValueError):
        return "0.0.0"


def parse(schema, tokens=Unset, /, **config):
    """
    Build a one-off Parser(schema, **config) and parse `tokens` with it.
    """
    return Parser(schema, **config).parse(tokens)


__all__ = (
    "Parser",
    "ParseResult",
    "parse",
)
