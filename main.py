import sys

from rich.pretty import pprint

from flagwrap.wrappers import build, run


if __name__ == '__main__':
    wrapper = {"build": build, "run": run}[sys.argv[1] if len(sys.argv) > 1 else "run"]
    pprint(wrapper)
    pprint(wrapper.plan(sys.argv[2:] or ["-it", "-c", "512", "-l", "stage=dev", "--log-level=debug", "ubuntu"]))
