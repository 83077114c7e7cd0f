"""
Collision resolution and merging of the two flag vocabularies.

The common (global) options of the wrapped tool and the options of one of its
subcommands are declared independently, so both may bind the same shorthand
letter to different long names (docker uses "-c" for "--context" globally and
for "--cpu-shares" in build/run). A Policy names the letters that the common
vocabulary gives up; merge() clears those shorthands from the common flags and
folds both vocabularies into one MergedSchema that records, for every flag,
which vocabulary it came from.

Guarantees of merge()
- every name in the merged schema has exactly one origin;
- no two merged flags share a shorthand;
- the input schemas are left untouched, so merging twice yields equal results.
Anything else is a ConfigurationError: a long name declared by both
vocabularies, or a shorthand collision the policy does not resolve.
"""
import copy
import re
from enum import StrEnum
from types import MappingProxyType

from .faults import FaultCode, NameCollisionError, ShorthandCollisionError
from .flags import Schema
from .utils import *


class Origin(StrEnum):
    COMMON = "common"
    SUBCOMMAND = "subcommand"


class Policy:
    """
    Static clear-set of shorthand letters the common vocabulary gives up.

    Policy("c", "l") means: a common flag bound to "-c" or "-l" keeps its long
    name but loses the shorthand, leaving the letter to the subcommand.
    """
    __slots__ = ("_letters",)

    letters = mirror("letters")

    def __init__(self, *letters):
        for letter in letters:
            if not isinstance(letter, str):
                raise TypeError("policy letters must be strings")
            elif not re.fullmatch(r"[A-Za-z]", letter):
                raise ValueError(f"policy letter {letter!r} must be a single ASCII letter")
        self._letters = frozenset(letters)

    def __contains__(self, letter):
        return letter in self._letters

    def __eq__(self, other):
        if not isinstance(other, Policy):
            return NotImplemented
        return self._letters == other._letters

    def __hash__(self):
        return hash(self._letters)

    def __repr__(self):
        return "policy(%s)" % ", ".join(map(repr, sorted(self._letters)))


POLICIES = MappingProxyType({
    # "-c" means --cpu-shares, not --context
    "build": Policy("c"),
    # "-c" means --cpu-shares, not --context; "-l" means --label, not --log-level
    "run": Policy("c", "l"),
})


class MergedSchema(Schema):
    """
    Schema holding the union of both vocabularies plus their attribution.

    - origin(name): Origin.COMMON, Origin.SUBCOMMAND, or None for a name the
      merge never saw.
    - split(): (common flags, subcommand flags), in declaration order, as used
      by the help renderer.
    """

    def __init__(self):
        super().__init__()
        self._origins = {}

    def attribute(self, flag, origin, /):
        self.add(flag)
        self._origins[flag.name] = Origin(origin)
        return flag

    def origin(self, name, /):
        return self._origins.get(name)

    @property
    def origins(self):
        return MappingProxyType(self._origins)

    def split(self):
        common = tuple(flag for flag in self if self._origins[flag.name] is Origin.COMMON)
        subcommand = tuple(flag for flag in self if self._origins[flag.name] is Origin.SUBCOMMAND)
        return common, subcommand

    def __eq__(self, other):
        if not isinstance(other, MergedSchema):
            return NotImplemented
        return list(self) == list(other) and self._origins == other._origins

    __hash__ = None


def merge(common, subcommand, policy=Policy(), /):
    """
    Merge the common and subcommand schemas under a collision policy.

    algorithm
    - visit every common flag; when its shorthand is in the policy, take a copy
      without the shorthand; attribute it to Origin.COMMON.
    - visit every subcommand flag unmodified; attribute it to Origin.SUBCOMMAND.

    raises
    - NameCollisionError: a long name exists in both schemas.
    - ShorthandCollisionError: a shorthand is still bound in both schemas after
      the policy was applied.
    """
    if not isinstance(common, Schema) or not isinstance(subcommand, Schema):
        raise TypeError("merge() arguments must be schemas")
    if not isinstance(policy, Policy):
        raise TypeError("merge() third argument must be a policy")

    merged = MergedSchema()

    for flag in common:
        if flag.shorthand and flag.shorthand in policy:
            flag = copy.replace(flag, shorthand=Unset)
        merged.attribute(flag, Origin.COMMON)

    for flag in subcommand:
        if flag.name in merged:
            raise NameCollisionError(
                "flag --%s is declared by both the common and the subcommand options" % flag.name,
                title="flag name collision",
                code=FaultCode.NAME_COLLISION,
                hint="rename or drop one of the two declarations of --%s" % flag.name,
                input=flag.name,
            )
        if flag.shorthand and (owner := merged.shorthand(flag.shorthand)):
            raise ShorthandCollisionError(
                "shorthand -%s is bound to both --%s and --%s" % (flag.shorthand, owner.name, flag.name),
                title="shorthand collision",
                code=FaultCode.SHORTHAND_COLLISION,
                hint="add %r to the collision policy of this subcommand" % flag.shorthand,
                input=flag.shorthand,
            )
        merged.attribute(flag, Origin.SUBCOMMAND)

    return merged


__all__ = (
    "Origin",
    "Policy",
    "POLICIES",
    "MergedSchema",
    "merge",
)
