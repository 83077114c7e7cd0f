"""
The two docker front ends: `docker-build-wrapper` and `docker-run-wrapper`.

Both are the same engine; they differ only in the wrapped subcommand and in the
shorthand letters the docker global options give up (see merger.POLICIES).
"""
from .dispatch import Wrapper, invoke
from .docker import DockerSource
from .merger import POLICIES
from .utils import rename

build = Wrapper(
    "build",
    DockerSource(),
    POLICIES["build"],
    prog="docker-build-wrapper",
    descr="A wrapper around `docker build`",
)

run = Wrapper(
    "run",
    DockerSource(),
    POLICIES["run"],
    prog="docker-run-wrapper",
    descr="A wrapper around `docker run`",
)


@rename("docker-build-wrapper")
def build_main():
    invoke(build)


@rename("docker-run-wrapper")
def run_main():
    invoke(run)


__all__ = (
    "build",
    "run",
    "build_main",
    "run_main",
)
