"""
Dispatch: turn one argument vector into one invocation of the wrapped tool.

Pipeline (single, synchronous pass)
1. load   the two vocabularies from the source and merge them under the policy;
2. parse  the argument vector against the merged schema;
3. check  that exactly one positional argument was given;
4. split  the explicitly set flags into common and subcommand options by origin;
5. run    `<tool> <common...> <subcommand> <subcommand options...> <positional>`
          with inherited standard streams, and map its termination to an exit code.

Exit codes
- 0 on success;
- the tool's own code when it exits non-zero (128 + N when killed by signal N);
- 1 for usage faults, configuration faults, and a tool that cannot be started.

Every fault surfaces as the return value of Wrapper.dispatch(); nothing is
retried, since build and run have side effects.
"""
import shlex
import subprocess
import sys
from collections.abc import Iterable

from .faults import *
from .help import render
from .loader import load
from .merger import POLICIES, Origin, Policy, merge
from .parser import parse
from .utils import *


class DispatchPlan:
    """
    Options and positionals for one invocation of the wrapped tool.

    - common: "--name=value" strings for the tool's global options.
    - subcommand: "--name=value" strings for the subcommand's options.
    - positionals: positional arguments, passed last.
    """
    __slots__ = ("_common", "_subcommand", "_positionals")

    common = mirror("common")
    subcommand = mirror("subcommand")
    positionals = mirror("positionals")

    def __init__(self, common=(), subcommand=(), positionals=()):
        self._common = tuple(common)
        self._subcommand = tuple(subcommand)
        self._positionals = tuple(positionals)

    def cmdline(self, tool, subcommand, /):
        """
        Assemble the full argument vector; tool may be one word or a sequence of words.
        """
        words = [tool] if isinstance(tool, str) else list(tool)
        return [*words, *self._common, subcommand, *self._subcommand, *self._positionals]

    def __eq__(self, other):
        if not isinstance(other, DispatchPlan):
            return NotImplemented
        return (self._common, self._subcommand, self._positionals) == (
            other._common, other._subcommand, other._positionals
        )

    def __hash__(self):
        return hash((self._common, self._subcommand, self._positionals))

    def __rich_repr__(self):
        yield "common", self._common
        yield "subcommand", self._subcommand
        yield "positionals", self._positionals

    def __repr__(self):
        return "dispatch-plan(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def partition(merged, parsed, /):
    """
    Route every explicitly set flag to the options list of its origin.

    Flags are visited in lexicographic name order, so the plan is stable for a
    given command line. A set flag without an origin means the merge is broken;
    it raises OrphanFlagError instead of being dropped from the invocation.
    """
    common = []
    subcommand = []

    for name, value in parsed.visit():
        flag = merged.lookup(name)
        match merged.origin(name) if flag else None:
            case Origin.COMMON:
                bucket = common
            case Origin.SUBCOMMAND:
                bucket = subcommand
            case _:
                raise OrphanFlagError(
                    "could not categorize flag --%s" % name,
                    title="unattributed flag",
                    code=FaultCode.ORPHAN_FLAG,
                    hint="the merged schema lost the origin of this flag; this is a bug in the wrapper",
                    input=name,
                )
        bucket.extend("--%s=%s" % (name, item) for item in flag.kind.serialize(value))

    return DispatchPlan(common, subcommand, parsed.positionals)


def _describe(executable, exception):
    match exception:
        case FileNotFoundError():
            return 'exec: "%s": executable file not found in $PATH' % executable
        case PermissionError():
            return "fork/exec %s: permission denied" % executable
        case _:
            return "fork/exec %s: %s" % (executable, exception.strerror or exception)


def execute(cmdline, /):
    """
    Run the assembled command line and wait for it to terminate.

    The child inherits stdin, stdout and stderr, so its output streams through
    live. The wait is unconditional: an interrupt delivered to the wrapper is
    also delivered to the child through the process group, and the wrapper keeps
    waiting for the child's own exit.

    raises
    - LaunchError: the executable could not be started.
    - StatusError: the child exited non-zero or was killed by a signal.
    """
    try:
        process = subprocess.Popen(cmdline)
    except OSError as exception:
        raise LaunchError(
            _describe(cmdline[0], exception),
            title="cannot start the wrapped tool",
            code=FaultCode.LAUNCH_FAILURE,
            executable=cmdline[0],
        ) from exception

    while True:
        try:
            status = process.wait()
            break
        except KeyboardInterrupt:
            continue

    if status < 0:
        status = 128 - status
    if status:
        raise StatusError(status_code=status, code=FaultCode.DELEGATED_STATUS, title="delegated status")


def _tokens(prompt):
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("dispatch() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("dispatch() argument must be a string or an iterable of strings")


class Wrapper:
    """
    One flattened front end for `<tool> <subcommand>`.

    Parameters
    - subcommand: str, the wrapped subcommand (e.g. "build").
    - source: Source, provider of the tool name and both vocabularies.
    - policy: Policy | Unset, shorthand clear-set; defaults to POLICIES[subcommand]
      (or an empty policy for a subcommand without an entry).
    - prog: str | Unset, program name used in messages and help
      (defaults to "<subcommand>-wrapper"; __prog__ in __main__ overrides it).
    - descr: str | Unset, one-line description for help.
    - colorful, fancy: rendering switches for diagnostics and help.
    """

    __introspectable__ = (
        "subcommand",
        "source",
        "policy",
        "prog",
        "descr",
        "colorful",
        "fancy",
    )

    subcommand = mirror("subcommand")
    source = mirror("source")
    policy = mirror("policy")
    descr = mirror("descr")
    colorful = mirror("colorful")
    fancy = mirror("fancy")

    def __init__(self, subcommand, source, policy=Unset, /, prog=Unset, descr=Unset, *, colorful=Unset, fancy=Unset):
        if not isinstance(subcommand, str) or not subcommand.strip():
            raise TypeError("wrapper subcommand must be a non-empty string")
        if not isinstance(policy := coalesce(policy, POLICIES.get(subcommand, Policy())), Policy):
            raise TypeError("wrapper policy must be a policy")

        self._subcommand = subcommand.strip()
        self._source = source
        self._policy = policy
        self._prog = coalesce(prog, "%s-wrapper" % self._subcommand)
        self._descr = coalesce(descr, "A wrapper around `%s`" % self._subcommand)
        self._colorful = bool(coalesce(colorful, False))
        self._fancy = bool(coalesce(fancy, False))

    @property
    def prog(self):
        return getattr(sys.modules.get("__main__"), "__prog__", self._prog)

    @property
    def usage(self):
        return "%s [OPTIONS] PATH | URL | -" % self.prog

    def load(self):
        """
        Return (tool, merged schema); any source or merge failure propagates as a ConfigurationError.
        """
        tool = self._source.tool
        common, subcommand = load(self._source, self._subcommand)
        return tool, merge(common, subcommand, self._policy)

    def assemble(self, merged, parsed, /):
        """
        Check the positional count and partition the parsed flags into a DispatchPlan.
        """
        if len(parsed.positionals) != 1:
            raise PositionalCountError(
                '"%s" requires exactly 1 argument.' % self.prog,
                title="wrong number of arguments",
                code=FaultCode.POSITIONAL_COUNT,
                hint="See '%s --help'.\n\nUsage:  %s\n\n%s" % (self.prog, self.usage, self._descr),
                positionals=parsed.positionals,
            )
        return partition(merged, parsed)

    def plan(self, prompt=Unset, /):
        """
        Load, parse and assemble without running anything; faults are raised.
        """
        _, merged = self.load()
        return self.assemble(merged, parse(merged, _tokens(prompt), prog=self.prog))

    def dispatch(self, prompt=Unset, /):
        """
        Run one full invocation and return the process exit code.

        prompt
        - Unset: sys.argv[1:]
        - str: split like a shell would (shlex.split)
        - Iterable[str]: used as-is
        """
        tokens = _tokens(prompt)
        ui = dict(prog=self.prog, colorful=self._colorful, fancy=self._fancy)
        try:
            tool, merged = self.load()
            parsed = parse(merged, tokens, prog=self.prog)
            for warning in parsed.warnings:
                trigger(warning, **ui)
            if parsed.help:
                render(self, merged, tool)
                return 0
            plan = self.assemble(merged, parsed)
            execute(plan.cmdline(tool, self._subcommand))
        except WrapperException as fault:
            return trigger(fault, **ui)
        return 0

    def __invoke__(self, prompt=Unset):
        sys.exit(self.dispatch(prompt))

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "wrapper(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def invoke(object, prompt=Unset, /):
    """
    Run a wrapper (or anything implementing __invoke__) and exit with its status.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "DispatchPlan",
    "partition",
    "execute",
    "Wrapper",
    "invoke",
)
