"""
Flagwrap faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the wrapper
  can surface. Codes are grouped by domain so logs and searches stay predictable.
- WrapperException / WrapperWarning: base types that carry a message + options,
  know their exit status, and render themselves with rich.
- trigger(): central entry point to surface a fault; it prints the diagnostic on
  stderr and hands back the exit status the process should end with.

Taxonomy
- configuration faults: the flag tables or the merge policy are wrong. These are
  bugs in the wrapper itself; they fail every invocation identically and render
  with a loud header so they are never mistaken for a bad command line.
- usage faults: the argument vector is wrong (unknown flag, bad value, wrong
  number of positionals). Messages mirror what the wrapped tool says itself.
- launch faults: the wrapped tool could not be started at all.
- delegated status: the wrapped tool ran and failed; its exit code is propagated
  and nothing is printed unless the tool surfaced a status line.

Integration
- Parsing/merging code raises faults with the domain options (code, title, hint,
  input, ...). The dispatcher adds the ui options (prog, colorful, fancy) through
  trigger(fault, **ui), which renders once and returns the exit status.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the wrapper (stable identifiers).

    grouping (by high-level domain)
    - configuration (101xx/102xx)
      • SOURCE_FAILURE, UNKNOWN_SUBCOMMAND, NAME_COLLISION, SHORTHAND_COLLISION, ORPHAN_FLAG
    - usage (111xx)
      • UNKNOWN_FLAG, MISSING_VALUE, INVALID_VALUE, POSITIONAL_COUNT
    - launch (112xx)
      • LAUNCH_FAILURE
    - delegated (1113x)
      • DELEGATED_STATUS
    - warnings (12xxx)
      • DEPRECATED_FLAG
    """
    # --- configuration faults (10xxx) ---
    SOURCE_FAILURE              = 10101
    UNKNOWN_SUBCOMMAND          = 10102
    NAME_COLLISION              = 10111
    SHORTHAND_COLLISION         = 10112
    ORPHAN_FLAG                 = 10121

    # --- usage faults (11xxx) ---
    UNKNOWN_FLAG                = 11112
    MISSING_VALUE               = 11117
    INVALID_VALUE               = 11124
    POSITIONAL_COUNT            = 11125

    # --- launch faults (11xxx) ---
    LAUNCH_FAILURE              = 11201

    # --- delegated status (11xxx) ---
    DELEGATED_STATUS            = 11131

    # --- warnings (12xxx) ---
    DEPRECATED_FLAG             = 12112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(sys.modules.get("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults, /):
    return defaultdict(str, defaults | getattr(sys.modules.get("__main__"), "__styles__", {}))


def _render(fault, styles, *, headline):
    """
    shared renderer for exceptions and warnings.

    layout
    - plain: the message on its own line, then the hint (if any) on the next one.
    - headline: a "[ prog — code | title ]" line first (always used for
      configuration faults, and as the panel title when fancy is on).
    """
    colorful = fault.options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), style if colorful else "")

    message = text(fault.message, styles["message"])
    renders = [message]
    if hint := fault.options.get("hint"):
        renders.append(text(hint, styles["hint"]))

    if not (headline or fault.options.get("fancy", False)):
        return Group(*renders)

    header = Text.assemble(
        "[ ",
        text(fault.options.get("prog", "flagwrap"), styles["prog-name"]),
        " — ",
        text(fault.options["code"].normalize() if "code" in fault.options else "?", styles["code"]),
        " | ",
        text(str(fault.options.get("title", type(fault).__name__)).title(), styles["title"]),
        " ]",
    )

    if fault.options.get("fancy", False):
        return Panel(Group(*renders), title=header, title_align="left")
    return Group(header, *renders)


class WrapperException(Exception):
    """
    base type of every error the wrapper surfaces.

    - message: the user-facing sentence (positional-only).
    - options: read-only mapping of domain and ui context (code, title, hint, prog, ...).
    - status: the exit status this fault maps to (1 unless a subclass says otherwise).
    """
    __headline__ = False

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def status(self):
        return 1

    def __rich__(self):
        return _render(self, _palette({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint": "italic #9CE19C",  # gentle green hint text
        }), headline=type(self).__headline__)

    def __trigger__(self):
        if self.message:
            console.print(self)
        return self.status

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(WrapperException):
    __headline__ = True


class LoaderError(ConfigurationError): ...
class NameCollisionError(ConfigurationError): ...
class ShorthandCollisionError(ConfigurationError): ...
class OrphanFlagError(ConfigurationError): ...


class UsageError(WrapperException): ...


class UnknownFlagError(UsageError): ...
class MissingValueError(UsageError): ...
class InvalidValueError(UsageError): ...
class PositionalCountError(UsageError): ...


class LaunchError(WrapperException): ...


class StatusError(WrapperException):
    """
    the wrapped tool ran and reported a failure.

    - message: optional status line surfaced by the tool (printed once when non-empty).
    - status_code: the tool's exit code; a zero code is forced to 1, since a status
      error always means failure.
    """

    @property
    def status(self):
        return self.options.get("status_code", 1) or 1


class WrapperWarning(Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, _palette({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint": "italic #B8EFAF",  # softer green hint text
        }), headline=False)

    def __trigger__(self):
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DeprecatedFlagWarning(WrapperWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - returns whatever __trigger__ returns: the exit status for exceptions,
      None for warnings.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    return copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "WrapperException",
    "ConfigurationError",
    "LoaderError",
    "NameCollisionError",
    "ShorthandCollisionError",
    "OrphanFlagError",
    "UsageError",
    "UnknownFlagError",
    "MissingValueError",
    "InvalidValueError",
    "PositionalCountError",
    "LaunchError",
    "StatusError",
    "WrapperWarning",
    "DeprecatedFlagWarning",
    "trigger",
)
