"""
Help rendering for a wrapper: usage, description, and the merged flags split
back into the options of the tool and the options of the subcommand.

The split uses the origins recorded by the merge, so a flag is listed under the
vocabulary it will be forwarded to, with its shorthand as the wrapper accepts it.
"""
import os.path
import sys
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text


def _default(flag):
    # Zero values are not worth showing, same as the wrapped tool's own help.
    if flag.default in (None, False, 0, "", "0", "0s", ()):
        return None
    if flag.kind.boolean:
        return "true"
    if flag.kind.repeatable:
        return "[%s]" % ",".join(flag.default)
    if isinstance(flag.default, str):
        return '"%s"' % flag.default
    return str(flag.default)


def render(wrapper, merged, tool, /, *, console=None):
    """
    Print the help of a wrapper on standard output.

    Palette keys
    - usage-label, program-name, usage-section, description-section
    - group-label, flag-name, metavar, argument-description, default, deprecated-name
    - panel-title

    Customization
    - Define a mapping named __styles__ in __main__ to override any palette entry.
    - When the wrapper is not colorful, styling is suppressed.
    """
    console = console or Console()
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",  # cyan signature label
        "program-name": "bold #FF4D94",  # magenta-pink brand
        "usage-section": "bold #36C5F0",  # sky-blue
        "description-section": "italic #A3A3A3",  # neutral gray
        "group-label": "bold #FFFFFF",  # white headers
        "flag-name": "bold #00E6FF",  # cyan names
        "deprecated-name": "bold #F97316 strike",  # orange strike
        "metavar": "bold #FFD600",  # amber parameters
        "argument-description": "#9CA3AF",  # muted gray
        "default": "#737373",  # dim gray
        "panel-title": "bold #FF4D94",
    } | getattr(sys.modules.get("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        return Text(str(fragment), styles[style] if wrapper.colorful else "")

    name = os.path.basename(tool if isinstance(tool, str) else tool[0])
    width = console.width - 4 * wrapper.fancy

    usage = Text.assemble(
        text("Usage:", "usage-label"), "  ",
        text(wrapper.prog, "program-name"), " ",
        text(wrapper.usage.removeprefix(wrapper.prog).strip(), "usage-section"),
        "\n",
    )
    renders = [usage, text(wrapper.descr, "description-section").append("\n")]

    common, subcommand = merged.split()
    sections = (
        ('Options for "%s":' % name, common),
        ('Options for "%s %s":' % (name, wrapper.subcommand), subcommand),
    )

    for index, (label, flags) in enumerate(sections):
        rows = []
        for flag in filter(lambda x: not x.hidden, flags):
            names = Text.assemble(
                "  ",
                "-%s, " % flag.shorthand if flag.shorthand else "    ",
                text("--" + flag.name, "deprecated-name" if flag.deprecated else "flag-name"),
            )
            if flag.metavar:
                names.append(" ").append(text(flag.metavar, "metavar"))
            descr = text(flag.descr or "", "argument-description")
            if default := _default(flag):
                descr.append(" ").append(text("(default %s)" % default, "default"))
            rows.append((names, descr))

        section = Text()
        section.append(text(label, "group-label")).append("\n")

        # Hanging indent: descriptions start on a shared column and wrap under it.
        indent = max((len(names) for names, _ in rows), default=0) + 3
        for names, descr in rows:
            section.append(names).append(" " * (indent - len(names)))
            wrapped = descr.wrap(console, max(width - indent, 20))
            for number, line in enumerate(wrapped):
                if number:
                    section.append("\n").append(" " * indent)
                section.append(line)
            section.append("\n")
        if index < len(sections) - 1:
            section.append("\n")
        renders.append(section)

    renders[-1].rstrip()
    renderable = Group(*renders)

    if wrapper.fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[ ", f"{wrapper.prog} HELP".upper(), " ]", style=styles["panel-title"] if wrapper.colorful else ""),
            title_align="left",
        )

    console.print(renderable)


__all__ = (
    "render",
)
