"""
Parser module behavioral tests (grammar, help requests, usage faults).

Scope
- Validate long and short spellings, bool clusters, "--" and "-" handling.
- Validate last-wins and accumulation semantics.
- Validate help detection, including a schema that claims "-h" for itself.
- Validate usage faults and their wording.
- Validate deprecation warnings.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagwrap import (
    Flag,
    Schema,
    Policy,
    merge,
    parse,
    FaultCode,
    UsageError,
    UnknownFlagError,
    MissingValueError,
    InvalidValueError,
    DeprecatedFlagWarning,
)


def schema(*, hostname=False):
    common = Schema([
        Flag("context", "c"),
        Flag("debug", "D", kind="bool"),
        Flag("host", "H", kind="list"),
    ])
    subcommand = Schema([
        Flag("cpu-shares", "c", kind="int"),
        Flag("detach", "d", kind="bool"),
        Flag("interactive", "i", kind="bool"),
        Flag("tty", "t", kind="bool"),
        Flag("env", "e", kind="list"),
        Flag("cache-from", kind="slice"),
        Flag("name"),
        Flag("memory", "m", kind="bytes"),
        Flag("kernel-memory", kind="bytes", deprecated="and no longer supported by the kernel"),
        *([Flag("hostname", "h")] if hostname else []),
    ])
    return merge(common, subcommand, Policy("c"))


class TestSpellings(TestCase):
    """Behavioral tests for accepted spellings."""

    def testLongWithEquals(self):
        parsed = parse(schema(), ["--name=web", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"name": "web"})
        self.assertEqual(parsed.positionals, ("ubuntu",))

    def testLongWithSpace(self):
        parsed = parse(schema(), ["--name", "web", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"name": "web"})

    def testLongEmptyValueIsAValue(self):
        parsed = parse(schema(), ["--name=", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"name": ""})

    def testLongBoolean(self):
        parsed = parse(schema(), ["--detach", "--debug=false", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"detach": True, "debug": False})

    def testBooleanDoesNotEatNextToken(self):
        parsed = parse(schema(), ["--detach", "ubuntu"])
        self.assertEqual(parsed.positionals, ("ubuntu",))

    def testShortWithSpace(self):
        parsed = parse(schema(), ["-c", "512", "/path"])
        self.assertEqual(dict(parsed.values), {"cpu-shares": 512})
        self.assertEqual(parsed.positionals, ("/path",))

    def testShortAttached(self):
        self.assertEqual(dict(parse(schema(), ["-c512", "/path"]).values), {"cpu-shares": 512})

    def testShortWithEquals(self):
        self.assertEqual(dict(parse(schema(), ["-c=512", "/path"]).values), {"cpu-shares": 512})

    def testBooleanCluster(self):
        parsed = parse(schema(), ["-itd", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"interactive": True, "tty": True, "detach": True})

    def testClusterEndingWithValueFlag(self):
        parsed = parse(schema(), ["-itm", "512m", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"interactive": True, "tty": True, "memory": "512m"})

    def testClusterWithAttachedValue(self):
        parsed = parse(schema(), ["-ie", "A=1", "-tc1024", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"interactive": True, "env": ["A=1"], "tty": True, "cpu-shares": 1024})

    def testValueMayStartWithDash(self):
        parsed = parse(schema(), ["--name", "-weird", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"name": "-weird"})

    def testLoneDashIsPositional(self):
        parsed = parse(schema(), ["-d", "-"])
        self.assertEqual(parsed.positionals, ("-",))

    def testDoubleDashEndsOptions(self):
        parsed = parse(schema(), ["--detach", "--", "--name", "x"])
        self.assertEqual(dict(parsed.values), {"detach": True})
        self.assertEqual(parsed.positionals, ("--name", "x"))

    def testInterspersedPositionals(self):
        parsed = parse(schema(), ["ubuntu", "--name", "web", "extra"])
        self.assertEqual(parsed.positionals, ("ubuntu", "extra"))

    def testScalarLastOccurrenceWins(self):
        parsed = parse(schema(), ["--name=a", "--name=b", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"name": "b"})

    def testRepeatableAccumulates(self):
        parsed = parse(schema(), ["-e", "A=1", "--env=B=2", "--cache-from=x,y", "--cache-from", "z", "ubuntu"])
        self.assertEqual(parsed.values["env"], ["A=1", "B=2"])
        self.assertEqual(parsed.values["cache-from"], ["x", "y", "z"])

    def testVisitIsLexicographic(self):
        parsed = parse(schema(), ["--name=a", "-d", "--debug", "-c", "2", "ubuntu"])
        self.assertEqual([name for name, _ in parsed.visit()], ["cpu-shares", "debug", "detach", "name"])

    def testNoFlagsLeavesValuesEmpty(self):
        parsed = parse(schema(), ["/path"])
        self.assertEqual(dict(parsed.values), {})
        self.assertFalse(parsed.help)


class TestHelp(TestCase):
    """Behavioral tests for help requests."""

    def testLongHelp(self):
        self.assertTrue(parse(schema(), ["--help"]).help)

    def testLongHelpFalse(self):
        self.assertFalse(parse(schema(), ["--help=false", "x"]).help)

    def testShortHelpWhenLetterIsFree(self):
        self.assertTrue(parse(schema(), ["-h"]).help)

    def testShortHelpYieldsToSchema(self):
        parsed = parse(schema(hostname=True), ["-h", "box", "ubuntu"])
        self.assertFalse(parsed.help)
        self.assertEqual(dict(parsed.values), {"hostname": "box"})


class TestUsageFaults(TestCase):
    """Behavioral tests for usage faults."""

    def testUnknownLongFlag(self):
        with self.assertRaises(UnknownFlagError) as context:
            parse(schema(), ["--bogus", "ubuntu"], prog="docker-run-wrapper")
        self.assertEqual(context.exception.message, "unknown flag: --bogus")
        self.assertEqual(context.exception.options["hint"], "See 'docker-run-wrapper --help'.")
        self.assertIs(context.exception.options["code"], FaultCode.UNKNOWN_FLAG)
        self.assertIsInstance(context.exception, UsageError)

    def testUnknownLongFlagSuggestsCloseMatch(self):
        with self.assertRaises(UnknownFlagError) as context:
            parse(schema(), ["--detech", "ubuntu"], prog="w")
        self.assertEqual(context.exception.options["hint"], "did you mean '--detach'? See 'w --help'.")

    def testUnknownShorthand(self):
        with self.assertRaises(UnknownFlagError) as context:
            parse(schema(), ["-ix", "ubuntu"])
        self.assertEqual(context.exception.message, "unknown shorthand flag: 'x' in -ix")

    def testMissingLongValue(self):
        with self.assertRaises(MissingValueError) as context:
            parse(schema(), ["ubuntu", "--name"])
        self.assertEqual(context.exception.message, "flag needs an argument: --name")

    def testMissingShortValue(self):
        with self.assertRaises(MissingValueError) as context:
            parse(schema(), ["ubuntu", "-c"])
        self.assertEqual(context.exception.message, "flag needs an argument: 'c' in -c")

    def testInvalidValue(self):
        with self.assertRaises(InvalidValueError) as context:
            parse(schema(), ["-c", "lots", "/path"])
        self.assertEqual(
            context.exception.message,
            'invalid argument "lots" for "-c, --cpu-shares" flag: expected an integer'
        )
        self.assertEqual(context.exception.status, 1)

    def testInvalidBooleanValue(self):
        with self.assertRaises(InvalidValueError):
            parse(schema(), ["--detach=maybe", "ubuntu"])


class TestDeprecation(TestCase):
    """Behavioral tests for deprecated flags."""

    def testDeprecatedFlagWarnsAndStaysSet(self):
        parsed = parse(schema(), ["--kernel-memory=1g", "ubuntu"])
        self.assertEqual(dict(parsed.values), {"kernel-memory": "1g"})
        warning, = parsed.warnings
        self.assertIsInstance(warning, DeprecatedFlagWarning)
        self.assertEqual(
            warning.message,
            "Flag --kernel-memory has been deprecated, and no longer supported by the kernel"
        )

    def testRegularFlagsDoNotWarn(self):
        self.assertEqual(parse(schema(), ["--name=a", "ubuntu"]).warnings, ())


if __name__ == "__main__":
    unittest.main()
