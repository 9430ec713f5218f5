"""
Vexil help and version pages (rich renderables).

render_usage(parser)   -> Text
render_help(parser)    -> Group | Panel
render_version(parser) -> Text | Panel

Help layout
- usage line: program name, sub-command slots, required flags, optional flags, tail slots
  (or the parser's explicit `usage`)
- description
- sub-command and tail tables (name, variable name, description)
- required flags, then optional flags: "--name, -n" over "[metavar :: default]" and
  the description
- epilog

Palette keys
- usage-label, program-name, program-version, usage-section, description-section,
  epilog-section, group-label, flag-name, metavar, default, slot-name,
  slot-table, argument-description, panel-title
- a mapping named __styles__ in __main__ overrides any entry; colorful=False drops
  every style.

Hidden specs are left out everywhere.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .utils import *

_PALETTE = {
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "program-version": "bold #00E6FF",
    "usage-section": "bold #36C5F0",
    "description-section": "italic #A3A3A3",
    "epilog-section": "#737373",
    "group-label": "bold #FFFFFF",
    "flag-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "default": "#22C55E",
    "slot-name": "bold #36C5F0",
    "slot-table": "#4B5563",
    "argument-description": "#9CA3AF",
    "panel-title": "bold #FF4D94",
}


class _Painter:
    """
    Style lookup bound to one parser's `colorful` flag.
    """

    def __init__(self, parser):
        self.colorful = parser.colorful
        self.styles = defaultdict(str, _PALETTE | getattr(__import__("__main__"), "__styles__", {}))

    def __call__(self, fragment, style=""):
        if isinstance(fragment, Text):
            return fragment.copy() if self.colorful else Text(fragment.plain)
        return Text(str(fragment), self.styles[style] if self.colorful else "")


def _metavar(parser, spec):
    return coalesce(spec.metavar, parser.typeof(spec))


def _flag_usage(parser, paint, name, option):
    usage = paint(parser.registry.labels[name].replace(", ", "|"), "flag-name")
    if parser.takes_value(option):
        usage.append(" <").append_text(paint(_metavar(parser, option), "metavar")).append(">")
    return usage


def render_usage(parser):
    paint = _Painter(parser)
    usage = Text()
    usage.append_text(paint("usage", "usage-label")).append(": ")

    if parser.usage is not None:
        return usage.append_text(paint(parser.usage, "usage-section"))

    registry = parser.registry
    parts = [paint(parser.name, "program-name")]

    for slot in filter(lambda x: not x.hidden, registry.subcommands):
        parts.append(Text.assemble("[", paint(coalesce(slot.metavar, slot.name), "slot-name"), "]"))

    for name in registry.required:
        if not (option := registry.options[name]).hidden:
            parts.append(_flag_usage(parser, paint, name, option))

    optional = [
        _flag_usage(parser, paint, name, option)
        for name, option in registry.options.items()
        if not option.required and not option.hidden
    ]
    if optional:
        parts.append(Text.assemble("[", Text(" | ").join(optional), "]"))

    for slot in filter(lambda x: not x.hidden, registry.tail):
        metavar = paint(coalesce(slot.metavar, slot.name), "slot-name")
        parts.append(Text.assemble("[", metavar, " ...]" if slot.rest else "]"))

    return usage.append_text(Text(" ").join(parts))


def _slot_table(parser, paint, title, slots):
    table = Table(
        "name", "value", "description",
        title=paint(title, "group-label"),
        box=ROUNDED,
        style=paint.styles["slot-table"] if parser.colorful else "",
        header_style=paint.styles["group-label"] if parser.colorful else "",
        title_justify="left",
    )
    for slot in slots:
        variable = coalesce(slot.metavar, slot.name) + (" ..." if getattr(slot, "rest", False) else "")
        table.add_row(
            paint(slot.name.upper(), "slot-name"),
            Text.assemble("[", paint(variable, "metavar"), "]"),
            paint(slot.descr or "", "argument-description"),
        )
    return table


def _flag_section(parser, paint, title, names):
    registry = parser.registry
    section = Text()
    section.append_text(paint(title, "group-label")).append(":\n")

    for name in names:
        option = registry.options[name]
        section.append("  ").append_text(paint(registry.labels[name], "flag-name")).append("\n")
        section.append("      [").append_text(paint(_metavar(parser, option), "metavar"))
        if option.default is not Unset:
            section.append(" :: ").append_text(paint(repr(option.default), "default"))
        section.append("]\n")
        if option.descr:
            section.append("      ").append_text(paint(option.descr, "argument-description")).append("\n")
    section.rstrip()
    return section


def render_help(parser):
    """
    Build the help page of `parser`.
    """
    paint = _Painter(parser)
    registry = parser.registry
    renders = [render_usage(parser)]

    if parser.descr:
        renders.append(Text.assemble("\n", paint(parser.descr, "description-section")))

    if subcommands := [slot for slot in registry.subcommands if not slot.hidden]:
        renders.append(_slot_table(parser, paint, "sub commands", subcommands))

    if tail := [slot for slot in registry.tail if not slot.hidden]:
        renders.append(_slot_table(parser, paint, "tailing arguments", tail))

    required = [name for name in registry.required if not registry.options[name].hidden]
    optional = [
        name for name, option in registry.options.items()
        if not option.required and not option.hidden
    ]
    if required:
        renders.append(Text("\n").append_text(_flag_section(parser, paint, "required flags", required)))
    if optional:
        title = "optional flags" if required else "flags"
        renders.append(Text("\n").append_text(_flag_section(parser, paint, title, optional)))

    if parser.epilog:
        renders.append(Text.assemble("\n", paint(parser.epilog, "epilog-section")))

    renderable = Group(*renders)
    if parser.fancy:
        renderable = Panel(
            renderable,
            title=Text("[ %s HELP ]" % parser.name.upper(), paint.styles["panel-title"] if parser.colorful else ""),
            title_align="left",
        )
    return renderable


def render_version(parser):
    """
    Build the version page of `parser`: "name — version".
    """
    paint = _Painter(parser)
    renderable = Text(" — ").join((
        paint(parser.name, "program-name"),
        paint(parser.version, "program-version"),
    ))
    if parser.fancy:
        renderable = Panel(
            renderable,
            title=Text("[ %s VERSION ]" % parser.name.upper(), paint.styles["panel-title"] if parser.colorful else ""),
            title_align="left",
        )
    return renderable


__all__ = (
    "render_usage",
    "render_help",
    "render_version",
)
