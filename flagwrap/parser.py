"""
Flag parsing against a merged schema.

The grammar is the one the wrapped tool's own parser accepts, so a command line
that works with the tool works with the wrapper:

- long options:  --name=value, --name value, --flag (bool), --flag=false
- short options: -c 512, -c512, -c=512, and clusters of bools such as -itd
  (the last letter of a cluster may take the rest of the token or the next one)
- "--" ends option parsing; a lone "-" is a positional (standard input)
- positionals may appear anywhere between options
- scalar options keep their last occurrence; repeatable ones accumulate
- --help (and -h when the schema leaves "h" free) requests help

Parsing stops at the first usage fault; the messages are worded like the wrapped
tool's own ("unknown flag: --bogus", "flag needs an argument: --name", ...).
"""
import difflib
from collections import deque
from types import MappingProxyType

from .faults import *
from .flags import Schema
from .utils import *


class ParsedInvocation:
    """
    Outcome of parsing one argument vector.

    Properties (read-only)
    - values: mapping of long name to parsed value, for flags the user set.
    - positionals: positional arguments, in command-line order.
    - help: whether help was requested.
    - warnings: WrapperWarning instances collected while parsing.
    """
    __slots__ = ("_values", "_positionals", "_help", "_warnings")

    positionals = mirror("positionals")
    help = mirror("help")
    warnings = mirror("warnings")

    def __init__(self, values=(), positionals=(), *, help=False, warnings=()):
        self._values = dict(values)
        self._positionals = tuple(positionals)
        self._help = bool(help)
        self._warnings = tuple(warnings)

    @property
    def values(self):
        return MappingProxyType(self._values)

    def visit(self):
        """
        Yield (name, value) for every explicitly set flag, in lexicographic name order.
        """
        for name in sorted(self._values):
            yield name, self._values[name]

    def __repr__(self):
        return "parsed-invocation(values=%r, positionals=%r, help=%r)" % (
            self._values, self._positionals, self._help
        )


def _hint(prog, suggestions=()):
    if suggestions:
        return "did you mean %r? See '%s --help'." % (suggestions[0], prog)
    return "See '%s --help'." % prog


def parse(schema, argv, /, *, prog="flagwrap"):
    """
    Parse an argument vector (program name excluded) against a schema.

    returns
    - ParsedInvocation

    raises
    - UnknownFlagError: a long name or shorthand the schema does not know.
    - MissingValueError: a value-bearing flag at the end of the vector.
    - InvalidValueError: a value its kind rejects.
    """
    if not isinstance(schema, Schema):
        raise TypeError("parse() first argument must be a schema")

    tokens = deque(argv)
    values = {}
    positionals = []
    warnings = []
    help = False
    index = 0

    def consume(flag, spelling, raw):
        nonlocal index
        if raw is Unset:
            if flag.kind.boolean:
                raw = "true"
            elif tokens:
                raw = tokens.popleft()
                index += 1
            else:
                raise MissingValueError(
                    "flag needs an argument: %s" % spelling,
                    title="missing option value",
                    code=FaultCode.MISSING_VALUE,
                    hint=_hint(prog),
                    input=flag.name,
                    index=index,
                )
        try:
            values[flag.name] = flag.kind.parse(raw, values.get(flag.name, Unset))
        except ValueError as exception:
            raise InvalidValueError(
                'invalid argument "%s" for "%s" flag: %s' % (raw, flag.spelling(), exception),
                title="invalid option value",
                code=FaultCode.INVALID_VALUE,
                hint=_hint(prog),
                input=flag.name,
                value=raw,
                index=index,
            ) from None
        if flag.deprecated:
            warnings.append(DeprecatedFlagWarning(
                "Flag --%s has been deprecated, %s" % (flag.name, flag.deprecated),
                title="deprecated flag",
                code=FaultCode.DEPRECATED_FLAG,
                input=flag.name,
                index=index,
            ))

    while tokens:
        token = tokens.popleft()
        index += 1

        if token == "--":
            positionals.extend(tokens)
            break

        if token == "-" or not token.startswith("-"):
            positionals.append(token)
            continue

        if token.startswith("--"):
            name, separator, raw = token[2:].partition("=")
            if name == "help" and name not in schema:
                help = help or not separator or raw in ("1", "t", "T", "TRUE", "true", "True")
                continue
            if (flag := schema.lookup(name)) is None:
                raise UnknownFlagError(
                    "unknown flag: --%s" % name,
                    title="unknown flag",
                    code=FaultCode.UNKNOWN_FLAG,
                    hint=_hint(prog, ["--" + match for match in difflib.get_close_matches(name, schema.names(), 1)]),
                    input=token,
                    index=index,
                )
            consume(flag, "--" + name, raw if separator else Unset)
            continue

        shorthands = token[1:]
        while shorthands:
            letter, shorthands = shorthands[0], shorthands[1:]
            if letter == "h" and schema.shorthand("h") is None:
                help = True
                continue
            if (flag := schema.shorthand(letter)) is None:
                raise UnknownFlagError(
                    "unknown shorthand flag: %r in %s" % (letter, token),
                    title="unknown flag",
                    code=FaultCode.UNKNOWN_FLAG,
                    hint=_hint(prog),
                    input=token,
                    index=index,
                )
            if shorthands.startswith("="):
                raw, shorthands = shorthands[1:], ""
            elif shorthands and not flag.kind.boolean:
                raw, shorthands = shorthands, ""
            else:
                raw = Unset
            consume(flag, "%r in %s" % (letter, token), raw)

    return ParsedInvocation(values, positionals, help=help, warnings=warnings)


__all__ = (
    "ParsedInvocation",
    "parse",
)
