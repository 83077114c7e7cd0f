r"""
Flagwrap flag specifications and schemas.

Overview
- Kind: how one family of flag values is parsed from the command line and
  serialized back for the wrapped tool (bool, string, int, uint, decimal, bytes,
  swap, duration, list, slice).
- Flag: one named option (long name, optional single-letter shorthand, kind,
  default, help metadata). Flags are immutable; copy.replace() yields a modified
  copy, which is how the merger clears shorthands without touching its inputs.
- Schema: an ordered set of flags keyed by long name, with a shorthand index.
  It exposes exactly what the merger and parser need: iteration, lookup by name,
  lookup by shorthand, and add.

Validation highlights
- Long names must match r"[^\W\d_](-?[^\W_]+)*" (no leading dashes, no underscores).
- Shorthands are a single ASCII letter.
- Within one schema, names and shorthands are unique; a duplicate is a
  declaration bug and raises ValueError immediately.

Serialization
- Scalar kinds serialize to one string (bool → "true"/"false", int → decimal form,
  bytes/swap/duration/decimal keep the user's spelling once validated).
- Repeatable kinds (list, slice) hold a list of strings and serialize to one
  string per value, so "-e A -e B" is forwarded as two options. An emptied
  value ("--cache-from=") is forwarded as a single empty option.
"""
import re
from fractions import Fraction
from types import MappingProxyType

from .utils import *


def _boolean(raw):
    # Same spellings as Go's strconv.ParseBool, which is what the wrapped tool accepts.
    if raw in ("1", "t", "T", "TRUE", "true", "True"):
        return True
    if raw in ("0", "f", "F", "FALSE", "false", "False"):
        return False
    raise ValueError("expected a boolean (true or false)")


def _integer(raw):
    # Go reads a bare leading zero as octal ("0755").
    if re.fullmatch(r"[-+]?0[0-7_]+", raw):
        raw = raw.replace("0", "0o", 1)
    try:
        return int(raw, 0)
    except ValueError:
        raise ValueError("expected an integer") from None


def _unsigned(raw):
    if (value := _integer(raw)) < 0:
        raise ValueError("expected a non-negative integer")
    return value


def _decimal(raw):
    # Same forms as Go's big.Rat: "1.5", "1e3", "3/2".
    try:
        Fraction(raw)
    except (ValueError, ZeroDivisionError):
        raise ValueError("expected a decimal number") from None
    return raw


def _bytes(raw):
    if not re.fullmatch(r"(\d+(\.\d+)*) ?([kKmMgGtTpP])?[iI]?[bB]?", raw):
        raise ValueError("expected a size such as 512m or 2g")
    return raw


def _swap(raw):
    # "-1" lifts the swap limit.
    return raw if raw == "-1" else _bytes(raw)


def _duration(raw):
    if raw != "0" and not re.fullmatch(r"[-+]?((\d+(\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h))+", raw):
        raise ValueError("expected a duration such as 30s or 1m30s")
    return raw


def _string(raw):
    return raw


def _items(raw):
    return [item for item in raw.split(",")] if raw else []


class Kind:
    """
    Value family of a flag.

    - name: identifier used in flag declarations ("int", "list", ...).
    - metavar: label shown in help when the flag declares none.
    - parse: converter from one raw token to a value; raises ValueError with a
      short reason when the token does not fit.
    - repeatable: values accumulate across occurrences instead of the last one winning.
    - boolean: the flag takes no separate value token.
    """
    __slots__ = ("_name", "_metavar", "_parse", "_repeatable", "_boolean")

    name = mirror("name")
    metavar = mirror("metavar")
    repeatable = mirror("repeatable")
    boolean = mirror("boolean")

    def __init__(self, name, metavar, parse, *, repeatable=False, boolean=False):
        self._name = name
        self._metavar = metavar
        self._parse = parse
        self._repeatable = repeatable
        self._boolean = boolean

    def parse(self, raw, current=Unset, /):
        """
        Convert a raw token and fold it into the current value.

        Scalar kinds replace the current value (last occurrence wins); repeatable
        kinds extend a fresh list so earlier results are never mutated.
        """
        value = self._parse(raw)
        if not self._repeatable:
            return value
        return [*coalesce(current, []), *(value if isinstance(value, list) else [value])]

    def serialize(self, value, /):
        """
        Return the option values to forward, one string per emitted option.
        """
        if self._repeatable:
            # An explicitly emptied list is still forwarded, as "--name=".
            return [str(item) for item in value] or [""]
        if self._boolean:
            return ["true" if value else "false"]
        return [str(value)]

    def __repr__(self):
        return f"kind({self._name!r})"


KINDS = MappingProxyType({kind.name: kind for kind in (
    Kind("bool", "", _boolean, boolean=True),
    Kind("string", "string", _string),
    Kind("int", "int", _integer),
    Kind("uint", "uint", _unsigned),
    Kind("decimal", "decimal", _decimal),
    Kind("bytes", "bytes", _bytes),
    Kind("swap", "bytes", _swap),
    Kind("duration", "duration", _duration),
    Kind("list", "list", _string, repeatable=True),
    Kind("slice", "strings", _items, repeatable=True),
)})


class Flag:
    """
    Named option specification.

    Properties (read-only)
    - name: long name without the leading "--".
    - shorthand: single ASCII letter, or None.
    - kind: the Kind instance that parses and serializes values.
    - default: value reported when the flag is not set (help only; never forwarded).
    - descr: short help text, or None.
    - metavar: label for the value in help (defaults to the kind's label).
    - hidden: suppressed from help.
    - deprecated: deprecation notice, or None.
    """

    __introspectable__ = (
        "name",
        "shorthand",
        "kind",
        "default",
        "descr",
        "metavar",
        "hidden",
        "deprecated",
    )

    __displayable__ = (
        "name",
        "shorthand",
        "kind",
    )

    name = mirror("name")
    shorthand = mirror("shorthand")
    kind = mirror("kind")
    default = mirror("default")
    descr = mirror("descr")
    metavar = mirror("metavar")
    hidden = mirror("hidden")
    deprecated = mirror("deprecated")

    def __init__(
            self,
            name,
            shorthand=Unset,
            /,
            kind="string",
            default=Unset,
            descr=Unset,
            metavar=Unset,
            *,
            hidden=False,
            deprecated=Unset,
    ):
        if not isinstance(name, str):
            raise TypeError("flag name must be a string")
        elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"flag name {name!r} must be a valid long option name without dashes")

        if not isinstance(shorthand, str | Unset | None):
            raise TypeError(f"flag {name!r} shorthand must be a string")
        elif shorthand and not re.fullmatch(r"[A-Za-z]", shorthand):
            raise ValueError(f"flag {name!r} shorthand must be a single ASCII letter")

        try:
            kind = KINDS[kind] if isinstance(kind, str) else kind
        except KeyError:
            raise ValueError(f"flag {name!r} has an unknown kind {kind!r}") from None
        if not isinstance(kind, Kind):
            raise TypeError(f"flag {name!r} kind must be a kind name")

        for field, value in (("descr", descr), ("metavar", metavar), ("deprecated", deprecated)):
            if not isinstance(value, str | Unset | None):
                raise TypeError(f"flag {name!r} {field!r} must be a string")

        self._name = name
        self._shorthand = shorthand or None
        self._kind = kind
        self._default = coalesce(default, [] if kind.repeatable else False if kind.boolean else None)
        self._descr = coalesce(descr) or None
        self._metavar = coalesce(metavar, kind.metavar)
        self._hidden = bool(hidden)
        self._deprecated = coalesce(deprecated) or None

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {name: getattr(self, "_" + name) for name in type(self).__introspectable__} | overrides
        return type(self)(
            fields.pop("name"),
            coalesce(fields.pop("shorthand"), None),
            **{name: coalesce(value, None) if name in ("descr", "deprecated") else value for name, value in fields.items()}
        )

    def __rich_repr__(self):
        for name in type(self).__displayable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "flag(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __eq__(self, other):
        if not isinstance(other, Flag):
            return NotImplemented
        return all(getattr(self, "_" + name) == getattr(other, "_" + name) for name in type(self).__introspectable__)

    def __hash__(self):
        return hash((self._name, self._shorthand, self._kind.name))

    def spelling(self):
        """
        Return the help spelling of the flag names, e.g. "-c, --cpu-shares".
        """
        return f"-{self._shorthand}, --{self._name}" if self._shorthand else f"--{self._name}"


class Schema:
    """
    Ordered set of flags keyed by long name.

    Operations
    - iter(schema): every flag, in declaration order.
    - lookup(name): the flag with that long name, or None.
    - shorthand(letter): the flag bound to that shorthand, or None.
    - add(flag): append a flag; duplicate names or shorthands raise ValueError.
    """

    def __init__(self, flags=(), /):
        self._flags = {}
        self._shorthands = {}
        for flag in flags:
            self.add(flag)

    def add(self, flag, /):
        if not isinstance(flag, Flag):
            raise TypeError("schema can only hold flags")
        if flag.name in self._flags:
            raise ValueError(f"flag redefined: {flag.name}")
        if flag.shorthand and flag.shorthand in self._shorthands:
            raise ValueError(
                f"unable to redefine {flag.shorthand!r} shorthand in {flag.name!r} flagset: "
                f"it's already used for {self._shorthands[flag.shorthand]!r} flag"
            )
        self._flags[flag.name] = flag
        if flag.shorthand:
            self._shorthands[flag.shorthand] = flag.name
        return flag

    def lookup(self, name, /):
        return self._flags.get(name)

    def shorthand(self, letter, /):
        try:
            return self._flags[self._shorthands[letter]]
        except KeyError:
            return None

    def names(self):
        return tuple(self._flags)

    def __iter__(self):
        return iter(tuple(self._flags.values()))

    def __len__(self):
        return len(self._flags)

    def __contains__(self, name):
        return name in self._flags

    def __eq__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return list(self) == list(other)

    __hash__ = None

    def __repr__(self):
        return f"schema({', '.join(self._flags)})"


__all__ = (
    "Kind",
    "KINDS",
    "Flag",
    "Schema",
)
