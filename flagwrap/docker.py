"""
Docker flag tables: the common options of `docker` and the options of
`docker build` and `docker run`, as declared by the docker client.

Defaults only matter for help output; only flags the user sets are ever
forwarded, so the wrapped client keeps applying its own defaults.
"""
import os
import os.path

from .faults import FaultCode, LoaderError
from .flags import Flag
from .loader import Source


def _config_dir():
    return os.environ.get("DOCKER_CONFIG") or os.path.join(os.path.expanduser("~"), ".docker")


def _common():
    config = _config_dir()
    return (
        Flag("config", kind="string", default=config, descr="Location of client config files"),
        Flag("context", "c", kind="string", descr=(
            'Name of the context to use to connect to the daemon '
            '(overrides DOCKER_HOST env var and default context set with "docker context use")'
        )),
        Flag("debug", "D", kind="bool", descr="Enable debug mode"),
        Flag("host", "H", kind="list", descr="Daemon socket to connect to"),
        Flag("log-level", "l", kind="string", default="info", descr=(
            'Set the logging level ("debug", "info", "warn", "error", "fatal")'
        )),
        Flag("tls", kind="bool", descr="Use TLS; implied by --tlsverify"),
        Flag("tlscacert", kind="string", default=os.path.join(config, "ca.pem"),
             descr="Trust certs signed only by this CA"),
        Flag("tlscert", kind="string", default=os.path.join(config, "cert.pem"),
             descr="Path to TLS certificate file"),
        Flag("tlskey", kind="string", default=os.path.join(config, "key.pem"),
             descr="Path to TLS key file"),
        Flag("tlsverify", kind="bool", default=bool(os.environ.get("DOCKER_TLS_VERIFY")),
             descr="Use TLS and verify the remote"),
    )


def _build():
    return (
        Flag("add-host", kind="list", descr='Add a custom host-to-IP mapping ("host:ip")'),
        Flag("build-arg", kind="list", descr="Set build-time variables"),
        Flag("cache-from", kind="slice", descr="Images to consider as cache sources"),
        Flag("cgroup-parent", kind="string", descr="Optional parent cgroup for the container"),
        Flag("compress", kind="bool", descr="Compress the build context using gzip"),
        Flag("cpu-period", kind="int", default=0, descr="Limit the CPU CFS (Completely Fair Scheduler) period"),
        Flag("cpu-quota", kind="int", default=0, descr="Limit the CPU CFS (Completely Fair Scheduler) quota"),
        Flag("cpu-shares", "c", kind="int", default=0, descr="CPU shares (relative weight)"),
        Flag("cpuset-cpus", kind="string", descr="CPUs in which to allow execution (0-3, 0,1)"),
        Flag("cpuset-mems", kind="string", descr="MEMs in which to allow execution (0-3, 0,1)"),
        Flag("disable-content-trust", kind="bool", default=True, descr="Skip image verification"),
        Flag("file", "f", kind="string", descr='Name of the Dockerfile (Default is "PATH/Dockerfile")'),
        Flag("force-rm", kind="bool", descr="Always remove intermediate containers"),
        Flag("iidfile", kind="string", descr="Write the image ID to the file"),
        Flag("isolation", kind="string", descr="Container isolation technology"),
        Flag("label", kind="list", descr="Set metadata for an image"),
        Flag("memory", "m", kind="bytes", descr="Memory limit"),
        Flag("memory-swap", kind="swap",
             descr='Swap limit equal to memory plus swap: "-1" to enable unlimited swap'),
        Flag("network", kind="string", default="default",
             descr="Set the networking mode for the RUN instructions during build"),
        Flag("no-cache", kind="bool", descr="Do not use cache when building the image"),
        Flag("output", "o", kind="list", descr='Output destination (format: "type=local,dest=path")'),
        Flag("platform", kind="string", default=os.environ.get("DOCKER_DEFAULT_PLATFORM"),
             descr="Set platform if server is multi-platform capable"),
        Flag("progress", kind="string", default="auto",
             descr='Set type of progress output ("auto", "plain", "tty"). Use plain to show container output'),
        Flag("pull", kind="bool", descr="Always attempt to pull a newer version of the image"),
        Flag("quiet", "q", kind="bool", descr="Suppress the build output and print image ID on success"),
        Flag("rm", kind="bool", default=True, descr="Remove intermediate containers after a successful build"),
        Flag("secret", kind="list", descr='Secret file to expose to the build: id=mysecret,src=/local/secret'),
        Flag("security-opt", kind="slice", descr="Security options"),
        Flag("shm-size", kind="bytes", descr="Size of /dev/shm"),
        Flag("squash", kind="bool", descr="Squash newly built layers into a single new layer"),
        Flag("ssh", kind="list", descr='SSH agent socket or keys to expose to the build'),
        Flag("stream", kind="bool", hidden=True, descr="Stream attaches to server to negotiate build context"),
        Flag("tag", "t", kind="list", descr='Name and optionally a tag in the "name:tag" format'),
        Flag("target", kind="string", descr="Set the target build stage to build."),
        Flag("ulimit", kind="list", descr="Ulimit options"),
    )


def _run():
    return (
        Flag("add-host", kind="list", descr='Add a custom host-to-IP mapping (host:ip)'),
        Flag("attach", "a", kind="list", descr="Attach to STDIN, STDOUT or STDERR"),
        Flag("blkio-weight", kind="uint", default=0,
             descr="Block IO (relative weight), between 10 and 1000, or 0 to disable"),
        Flag("blkio-weight-device", kind="list", descr="Block IO weight (relative device weight)"),
        Flag("cap-add", kind="list", descr="Add Linux capabilities"),
        Flag("cap-drop", kind="list", descr="Drop Linux capabilities"),
        Flag("cgroup-parent", kind="string", descr="Optional parent cgroup for the container"),
        Flag("cgroupns", kind="string", descr="Cgroup namespace to use (host|private)"),
        Flag("cidfile", kind="string", descr="Write the container ID to the file"),
        Flag("cpu-period", kind="int", default=0, descr="Limit CPU CFS (Completely Fair Scheduler) period"),
        Flag("cpu-quota", kind="int", default=0, descr="Limit CPU CFS (Completely Fair Scheduler) quota"),
        Flag("cpu-rt-period", kind="int", default=0, descr="Limit CPU real-time period in microseconds"),
        Flag("cpu-rt-runtime", kind="int", default=0, descr="Limit CPU real-time runtime in microseconds"),
        Flag("cpu-shares", "c", kind="int", default=0, descr="CPU shares (relative weight)"),
        Flag("cpus", kind="decimal", descr="Number of CPUs"),
        Flag("cpuset-cpus", kind="string", descr="CPUs in which to allow execution (0-3, 0,1)"),
        Flag("cpuset-mems", kind="string", descr="MEMs in which to allow execution (0-3, 0,1)"),
        Flag("detach", "d", kind="bool", descr="Run container in background and print container ID"),
        Flag("detach-keys", kind="string", descr="Override the key sequence for detaching a container"),
        Flag("device", kind="list", descr="Add a host device to the container"),
        Flag("device-cgroup-rule", kind="list", descr="Add a rule to the cgroup allowed devices list"),
        Flag("device-read-bps", kind="list", descr="Limit read rate (bytes per second) from a device"),
        Flag("device-read-iops", kind="list", descr="Limit read rate (IO per second) from a device"),
        Flag("device-write-bps", kind="list", descr="Limit write rate (bytes per second) to a device"),
        Flag("device-write-iops", kind="list", descr="Limit write rate (IO per second) to a device"),
        Flag("disable-content-trust", kind="bool", default=True, descr="Skip image verification"),
        Flag("dns", kind="list", descr="Set custom DNS servers"),
        Flag("dns-option", kind="list", descr="Set DNS options"),
        Flag("dns-search", kind="list", descr="Set custom DNS search domains"),
        Flag("domainname", kind="string", descr="Container NIS domain name"),
        Flag("entrypoint", kind="string", descr="Overwrite the default ENTRYPOINT of the image"),
        Flag("env", "e", kind="list", descr="Set environment variables"),
        Flag("env-file", kind="list", descr="Read in a file of environment variables"),
        Flag("expose", kind="list", descr="Expose a port or a range of ports"),
        Flag("gpus", kind="string", descr='GPU devices to add to the container ("all" to pass all GPUs)'),
        Flag("group-add", kind="list", descr="Add additional groups to join"),
        Flag("health-cmd", kind="string", descr="Command to run to check health"),
        Flag("health-interval", kind="duration", default="0s", descr="Time between running the check (ms|s|m|h)"),
        Flag("health-retries", kind="int", default=0, descr="Consecutive failures needed to report unhealthy"),
        Flag("health-start-period", kind="duration", default="0s",
             descr="Start period for the container to initialize before starting health-retries countdown (ms|s|m|h)"),
        Flag("health-timeout", kind="duration", default="0s", descr="Maximum time to allow one check to run (ms|s|m|h)"),
        Flag("hostname", "h", kind="string", descr="Container host name"),
        Flag("init", kind="bool", descr="Run an init inside the container that forwards signals and reaps processes"),
        Flag("interactive", "i", kind="bool", descr="Keep STDIN open even if not attached"),
        Flag("ip", kind="string", descr="IPv4 address (e.g., 172.30.100.104)"),
        Flag("ip6", kind="string", descr="IPv6 address (e.g., 2001:db8::33)"),
        Flag("ipc", kind="string", descr="IPC mode to use"),
        Flag("isolation", kind="string", descr="Container isolation technology"),
        Flag("kernel-memory", kind="bytes", descr="Kernel memory limit", hidden=True,
             deprecated="and no longer supported by the kernel"),
        Flag("label", "l", kind="list", descr="Set meta data on a container"),
        Flag("label-file", kind="list", descr="Read in a line delimited file of labels"),
        Flag("link", kind="list", descr="Add link to another container"),
        Flag("link-local-ip", kind="list", descr="Container IPv4/IPv6 link-local addresses"),
        Flag("log-driver", kind="string", descr="Logging driver for the container"),
        Flag("log-opt", kind="list", descr="Log driver options"),
        Flag("mac-address", kind="string", descr="Container MAC address (e.g., 92:d0:c6:0a:29:33)"),
        Flag("memory", "m", kind="bytes", descr="Memory limit"),
        Flag("memory-reservation", kind="bytes", descr="Memory soft limit"),
        Flag("memory-swap", kind="swap",
             descr='Swap limit equal to memory plus swap: "-1" to enable unlimited swap'),
        Flag("memory-swappiness", kind="int", default=-1, descr="Tune container memory swappiness (0 to 100)"),
        Flag("mount", kind="list", descr="Attach a filesystem mount to the container"),
        Flag("name", kind="string", descr="Assign a name to the container"),
        Flag("network", kind="string", default="default", descr="Connect a container to a network"),
        Flag("network-alias", kind="list", descr="Add network-scoped alias for the container"),
        Flag("no-healthcheck", kind="bool", descr="Disable any container-specified HEALTHCHECK"),
        Flag("oom-kill-disable", kind="bool", descr="Disable OOM Killer"),
        Flag("oom-score-adj", kind="int", default=0, descr="Tune host's OOM preferences (-1000 to 1000)"),
        Flag("pid", kind="string", descr="PID namespace to use"),
        Flag("pids-limit", kind="int", default=0, descr="Tune container pids limit (set -1 for unlimited)"),
        Flag("platform", kind="string", default=os.environ.get("DOCKER_DEFAULT_PLATFORM"),
             descr="Set platform if server is multi-platform capable"),
        Flag("privileged", kind="bool", descr="Give extended privileges to this container"),
        Flag("publish", "p", kind="list", descr="Publish a container's port(s) to the host"),
        Flag("publish-all", "P", kind="bool", descr="Publish all exposed ports to random ports"),
        Flag("pull", kind="string", default="missing",
             descr='Pull image before running ("always"|"missing"|"never")'),
        Flag("quiet", "q", kind="bool", descr="Suppress the pull output"),
        Flag("read-only", kind="bool", descr="Mount the container's root filesystem as read only"),
        Flag("restart", kind="string", default="no", descr="Restart policy to apply when a container exits"),
        Flag("rm", kind="bool", descr="Automatically remove the container when it exits"),
        Flag("runtime", kind="string", descr="Runtime to use for this container"),
        Flag("security-opt", kind="list", descr="Security Options"),
        Flag("shm-size", kind="bytes", descr="Size of /dev/shm"),
        Flag("sig-proxy", kind="bool", default=True, descr="Proxy received signals to the process"),
        Flag("stop-signal", kind="string", descr="Signal to stop the container"),
        Flag("stop-timeout", kind="int", default=0, descr="Timeout (in seconds) to stop a container"),
        Flag("storage-opt", kind="list", descr="Storage driver options for the container"),
        Flag("sysctl", kind="list", descr="Sysctl options"),
        Flag("tmpfs", kind="list", descr="Mount a tmpfs directory"),
        Flag("tty", "t", kind="bool", descr="Allocate a pseudo-TTY"),
        Flag("ulimit", kind="list", descr="Ulimit options"),
        Flag("user", "u", kind="string", descr="Username or UID (format: <name|uid>[:<group|gid>])"),
        Flag("userns", kind="string", descr="User namespace to use"),
        Flag("uts", kind="string", descr="UTS namespace to use"),
        Flag("volume", "v", kind="list", descr="Bind mount a volume"),
        Flag("volume-driver", kind="string", descr="Optional volume driver for the container"),
        Flag("volumes-from", kind="list", descr="Mount volumes from the specified container(s)"),
        Flag("workdir", "w", kind="string", descr="Working directory inside the container"),
    )


class DockerSource(Source):
    """
    Flag vocabularies of the docker command line client.

    The executable defaults to "docker" and can be overridden with the tool
    argument or the FLAGWRAP_TOOL environment variable (in that order).
    """
    subcommands = {
        "build": _build,
        "run": _run,
    }

    def __init__(self, tool=None):
        self._tool = tool

    @property
    def tool(self):
        if self._tool is not None:
            return self._tool
        tool = os.environ.get("FLAGWRAP_TOOL")
        if tool is None:
            return "docker"
        if not tool.strip():
            raise LoaderError(
                "FLAGWRAP_TOOL is set but does not name an executable",
                title="misconfigured environment",
                code=FaultCode.SOURCE_FAILURE,
                hint="unset FLAGWRAP_TOOL or point it at the docker client",
            )
        return tool.strip()

    def common(self):
        return _common()

    def subcommand(self, name, /):
        try:
            return type(self).subcommands[name]()
        except KeyError:
            raise LoaderError(
                "unknown docker subcommand %r" % name,
                title="unknown subcommand",
                code=FaultCode.UNKNOWN_SUBCOMMAND,
                hint="known subcommands: %s" % ", ".join(sorted(type(self).subcommands)),
                subcommand=name,
            ) from None


__all__ = (
    "DockerSource",
)
