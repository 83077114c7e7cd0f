"""
Schema loading: obtain the two source vocabularies from the wrapped tool.

A Source describes the tool being wrapped: the executable to run, its common
(global) options, and the options of each subcommand it knows. load() asks a
source for one subcommand and returns two fresh, independent Schema values;
nothing is merged or mutated here.

Any failure of the source to produce its schemas (an unknown subcommand, a
misconfigured environment, a broken flag declaration) is reported as a
LoaderError, so the process stops before any flag logic runs.
"""
from abc import ABC, abstractmethod

from .faults import FaultCode, LoaderError
from .flags import Schema


class Source(ABC):
    """
    Contract of the wrapped tool's schema provider.

    - tool: the executable name (or a tuple of argv words) to launch.
    - common(): iterable of the tool's common/global flags.
    - subcommand(name): iterable of the named subcommand's flags; raises
      LoaderError for a subcommand the source does not know.
    """

    @property
    @abstractmethod
    def tool(self): ...

    @abstractmethod
    def common(self): ...

    @abstractmethod
    def subcommand(self, name, /): ...


def load(source, subcommand, /):
    """
    Return (common, subcommand) schemas for one subcommand of the source.

    Both schemas are rebuilt on every call, so callers may treat them as
    private values.
    """
    if not isinstance(source, Source):
        raise TypeError("load() first argument must be a schema source")
    if not isinstance(subcommand, str) or not subcommand:
        raise TypeError("load() second argument must be a non-empty string")

    try:
        return Schema(source.common()), Schema(source.subcommand(subcommand))
    except LoaderError:
        raise
    except (TypeError, ValueError) as exception:
        raise LoaderError(
            "cannot load the flags of %r: %s" % (subcommand, exception),
            title="broken flag declaration",
            code=FaultCode.SOURCE_FAILURE,
            hint="the flag tables of the wrapped tool are inconsistent",
            subcommand=subcommand,
        ) from exception


__all__ = (
    "Source",
    "load",
)
