"""
Dispatch module behavioral tests (plans, exit codes, child process, help).

Scope
- Validate plan assembly: routing by origin, lexicographic order, positionals.
- Validate that usage and configuration faults never start the wrapped tool.
- Validate exit code propagation from a real child process.
- Validate launch failures, help output, and deprecation warnings.

Conventions
- Test method names follow CamelCase per project convention.
- The wrapped tool is either mocked at subprocess.Popen or replaced by the
  running interpreter through a stub source.
"""

from __future__ import annotations

import contextlib
import io
import json
import os
import sys
import tempfile
import unittest
from unittest import TestCase, mock

from flagwrap import (
    Flag,
    Source,
    Policy,
    DispatchPlan,
    ParsedInvocation,
    Wrapper,
    invoke,
    merge,
    partition,
    load,
    OrphanFlagError,
    PositionalCountError,
    UnknownFlagError,
)
from flagwrap.docker import DockerSource


class StubSource(Source):
    """A small docker-like vocabulary around an arbitrary executable."""

    def __init__(self, tool="docker"):
        self._tool = tool

    @property
    def tool(self):
        return self._tool

    def common(self):
        return (
            Flag("context", "c"),
            Flag("debug", "D", kind="bool"),
            Flag("log-level", "l", default="info"),
        )

    def subcommand(self, name, /):
        return (
            Flag("cpu-shares", "c", kind="int"),
            Flag("tag", "t", kind="list"),
            Flag("rm", kind="bool"),
            Flag("kernel-memory", kind="bytes", hidden=True, deprecated="use --memory"),
        )


def python(script):
    return (sys.executable, "-c", script)


def wrapper(tool="docker"):
    return Wrapper("build", StubSource(tool), Policy("c"))


class TestPlan(TestCase):
    """Behavioral tests for plan assembly."""

    def testPolicyLetterReachesSubcommand(self):
        plan = wrapper().plan(["-c", "512", "/path"])
        self.assertEqual(plan, DispatchPlan((), ["--cpu-shares=512"], ["/path"]))

    def testNoFlagsYieldEmptyOptionLists(self):
        plan = wrapper().plan(["/path"])
        self.assertEqual(plan.common, ())
        self.assertEqual(plan.subcommand, ())
        self.assertEqual(plan.positionals, ("/path",))

    def testFlagsRouteByOriginInNameOrder(self):
        plan = wrapper().plan([
            "--log-level=debug", "-t", "a", "--context", "prod", "-D", "ctx", "-t", "b",
        ])
        self.assertEqual(plan.common, ("--context=prod", "--debug=true", "--log-level=debug"))
        self.assertEqual(plan.subcommand, ("--tag=a", "--tag=b"))
        self.assertEqual(plan.positionals, ("ctx",))

    def testExplicitFalseIsForwarded(self):
        plan = wrapper().plan(["--rm=false", "ctx"])
        self.assertEqual(plan.subcommand, ("--rm=false",))

    def testEmptiedSliceIsForwarded(self):
        build = Wrapper("build", DockerSource(tool="docker"))
        plan = build.plan(["--cache-from=", "/path"])
        self.assertEqual(plan.subcommand, ("--cache-from=",))

    def testPromptStringIsShellSplit(self):
        plan = wrapper().plan("-c 512 '/my path'")
        self.assertEqual(plan.positionals, ("/my path",))

    def testCmdlineLayout(self):
        plan = DispatchPlan(["--debug=true"], ["--cpu-shares=512"], ["/path"])
        self.assertEqual(
            plan.cmdline("docker", "build"),
            ["docker", "--debug=true", "build", "--cpu-shares=512", "/path"],
        )
        self.assertEqual(plan.cmdline(("env", "docker"), "build")[:3], ["env", "docker", "--debug=true"])

    def testMissingPositionalIsAUsageFault(self):
        with self.assertRaises(PositionalCountError) as context:
            wrapper().plan(["-c", "512"])
        self.assertEqual(context.exception.message, '"build-wrapper" requires exactly 1 argument.')

    def testTwoPositionalsIsAUsageFault(self):
        with self.assertRaises(PositionalCountError):
            wrapper().plan(["a", "b"])

    def testOrphanFlagIsNeverDropped(self):
        merged = merge(*load(StubSource(), "build"), Policy("c"))
        with self.assertRaises(OrphanFlagError) as context:
            partition(merged, ParsedInvocation({"ghost": "x"}, ["/path"]))
        self.assertEqual(context.exception.message, "could not categorize flag --ghost")

    def testDockerRunPlan(self):
        run = Wrapper("run", DockerSource(tool="docker"))
        plan = run.plan(["-it", "-c", "512", "-l", "stage=dev", "--log-level=debug", "-h", "box", "ubuntu"])
        self.assertEqual(plan.common, ("--log-level=debug",))
        self.assertEqual(
            plan.subcommand,
            ("--cpu-shares=512", "--hostname=box", "--interactive=true", "--label=stage=dev", "--tty=true"),
        )


class TestDispatchWithoutLaunch(TestCase):
    """Faults found before launch return 1 and never start the tool."""

    def setUp(self):
        patcher = mock.patch("flagwrap.dispatch.subprocess.Popen")
        self.popen = patcher.start()
        self.popen.return_value.wait.return_value = 0
        self.addCleanup(patcher.stop)

    def dispatch(self, target, argv):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            status = target.dispatch(argv)
        return status, stderr.getvalue()

    def testMissingPositional(self):
        status, stderr = self.dispatch(wrapper(), ["-c", "512"])
        self.assertEqual(status, 1)
        self.assertIn('"build-wrapper" requires exactly 1 argument.', stderr)
        self.popen.assert_not_called()

    def testTooManyPositionals(self):
        status, _ = self.dispatch(wrapper(), ["a", "b"])
        self.assertEqual(status, 1)
        self.popen.assert_not_called()

    def testUnknownFlag(self):
        status, stderr = self.dispatch(wrapper(), ["--bogus", "/path"])
        self.assertEqual(status, 1)
        self.assertIn("unknown flag: --bogus", stderr)
        self.popen.assert_not_called()

    def testInvalidValue(self):
        status, stderr = self.dispatch(wrapper(), ["-c", "lots", "/path"])
        self.assertEqual(status, 1)
        self.assertIn('invalid argument "lots"', stderr)
        self.popen.assert_not_called()

    def testBrokenPolicyIsAConfigurationFault(self):
        status, stderr = self.dispatch(Wrapper("build", StubSource(), Policy()), ["/path"])
        self.assertEqual(status, 1)
        self.assertIn("shorthand -c is bound to both", stderr)
        self.popen.assert_not_called()

    def testBlankToolVariableIsAConfigurationFault(self):
        with mock.patch.dict(os.environ, {"FLAGWRAP_TOOL": "  "}):
            status, stderr = self.dispatch(Wrapper("build", DockerSource()), ["/path"])
        self.assertEqual(status, 1)
        self.assertIn("FLAGWRAP_TOOL", stderr)
        self.popen.assert_not_called()

    def testSuccessfulDispatchRunsOneCommandLine(self):
        status, stderr = self.dispatch(wrapper(), ["-D", "-c", "512", "/path"])
        self.assertEqual(status, 0)
        self.assertEqual(stderr, "")
        self.popen.assert_called_once_with(["docker", "--debug=true", "build", "--cpu-shares=512", "/path"])

    def testUnlimitedSwapIsForwarded(self):
        run = Wrapper("run", DockerSource(tool="docker"))
        status, stderr = self.dispatch(run, ["-m", "512m", "--memory-swap=-1", "ubuntu"])
        self.assertEqual(status, 0)
        self.assertEqual(stderr, "")
        self.popen.assert_called_once_with(
            ["docker", "run", "--memory=512m", "--memory-swap=-1", "ubuntu"]
        )

    def testInterruptKeepsWaiting(self):
        self.popen.return_value.wait.side_effect = [KeyboardInterrupt(), 0]
        status, _ = self.dispatch(wrapper(), ["/path"])
        self.assertEqual(status, 0)
        self.assertEqual(self.popen.return_value.wait.call_count, 2)

    def testSignalMapsToShellConvention(self):
        self.popen.return_value.wait.return_value = -9
        status, _ = self.dispatch(wrapper(), ["/path"])
        self.assertEqual(status, 137)

    def testDeprecatedFlagWarnsAndIsForwarded(self):
        status, stderr = self.dispatch(wrapper(), ["--kernel-memory=1g", "/path"])
        self.assertEqual(status, 0)
        self.assertIn("Flag --kernel-memory has been deprecated, use --memory", stderr)
        self.popen.assert_called_once_with(["docker", "build", "--kernel-memory=1g", "/path"])

    def testHelpPrintsBothVocabularies(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            status, _ = self.dispatch(Wrapper("build", DockerSource(tool="docker")), ["--help"])
        output = stdout.getvalue()
        self.assertEqual(status, 0)
        self.assertIn("Usage:  build-wrapper [OPTIONS] PATH | URL | -", output)
        self.assertIn('Options for "docker":', output)
        self.assertIn('Options for "docker build":', output)
        self.assertIn("-c, --cpu-shares", output)
        self.assertIn("      --context", output)
        self.assertNotIn("-c, --context", output)
        self.popen.assert_not_called()

    def testHelpWinsOverMissingPositional(self):
        with contextlib.redirect_stdout(io.StringIO()):
            status, _ = self.dispatch(wrapper(), ["-h"])
        self.assertEqual(status, 0)
        self.popen.assert_not_called()

    def testInvokeExitsWithStatus(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as context:
                invoke(wrapper(), ["a", "b"])
        self.assertEqual(context.exception.code, 1)

    def testInvokeRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            invoke(object())


class TestDispatchWithChild(TestCase):
    """End-to-end dispatch against a real child process."""

    def dispatch(self, target, argv):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            status = target.dispatch(argv)
        return status, stderr.getvalue()

    def testChildReceivesAssembledCmdline(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "argv.json")
            script = "import json, sys; json.dump(sys.argv[1:], open(%r, 'w'))" % path
            status, _ = self.dispatch(wrapper(python(script)), ["-D", "-c", "512", "/path"])
            with open(path) as file:
                argv = json.load(file)
        self.assertEqual(status, 0)
        self.assertEqual(argv, ["--debug=true", "build", "--cpu-shares=512", "/path"])

    def testChildExitCodeIsPropagatedSilently(self):
        status, stderr = self.dispatch(wrapper(python("import sys; sys.exit(125)")), ["/path"])
        self.assertEqual(status, 125)
        self.assertEqual(stderr, "")

    @unittest.skipUnless(os.name == "posix", "signals are POSIX only")
    def testChildKilledBySignal(self):
        script = "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"
        status, _ = self.dispatch(wrapper(python(script)), ["/path"])
        self.assertEqual(status, 143)

    def testMissingExecutable(self):
        status, stderr = self.dispatch(wrapper("/nonexistent/tool"), ["/path"])
        self.assertEqual(status, 1)
        self.assertEqual(stderr.strip(), 'exec: "/nonexistent/tool": executable file not found in $PATH')

    def testUsageFaultStopsBeforeChild(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "ran")
            script = "open(%r, 'w').close()" % path
            with self.assertRaises(UnknownFlagError):
                wrapper(python(script)).plan(["--bogus", "/path"])
            status, _ = self.dispatch(wrapper(python(script)), ["--bogus", "/path"])
            self.assertEqual(status, 1)
            self.assertFalse(os.path.exists(path))


if __name__ == "__main__":
    unittest.main()
