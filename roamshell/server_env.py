"""Server settings taken from the environment and the controlling terminal."""

import os
import pwd
import re
import sys
from dataclasses import dataclass

DEFAULT_SHELL = "/bin/sh"
DEFAULT_WINDOW_SIZE = (80, 24)

NETWORK_TIMEOUT_VARIABLE = "ROAMSHELL_SERVER_NETWORK_TMOUT"
SIGNAL_TIMEOUT_VARIABLE = "ROAMSHELL_SERVER_SIGNAL_TMOUT"
NO_CLIENT_TIMEOUT_VARIABLE = "ROAMSHELL_SERVER_NO_CLIENT_TMOUT"

_LONG_MIN = -(1 << 63)
_LONG_MAX = (1 << 63) - 1
_INTEGER = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


def parse_timeout(environ, name, default):
    """Read a timeout in seconds from environ[name].

    An unset or empty variable gives the default; an invalid or negative one
    gives the default with a warning on stderr.
    """
    text = environ.get(name)
    if not text:
        return default
    match = _INTEGER.fullmatch(text)
    if match is None:
        print(f"{name} not a valid integer, ignoring", file=sys.stderr)
        return default
    value = max(_LONG_MIN, min(_LONG_MAX, int(match.group(1))))
    if value < 0:
        print(f"{name} is negative, ignoring", file=sys.stderr)
        return default
    return value


@dataclass(frozen=True)
class ServerTimeouts:
    """Idle timeouts in seconds; zero disables the network and signal ones."""

    network: int = 0
    signaled: int = 0
    no_client: int = 60

    @classmethod
    def from_environ(cls, environ=None):
        """Read all three timeouts from the environment."""
        if environ is None:
            environ = os.environ
        return cls(
            network=parse_timeout(environ, NETWORK_TIMEOUT_VARIABLE, 0),
            signaled=parse_timeout(environ, SIGNAL_TIMEOUT_VARIABLE, 0),
            no_client=parse_timeout(environ, NO_CLIENT_TIMEOUT_VARIABLE, 60),
        )

    @property
    def network_ms(self):
        return self.network * 1000

    @property
    def signaled_ms(self):
        return self.signaled * 1000

    @property
    def no_client_ms(self):
        return self.no_client * 1000


def login_shell(environ=None):
    """Return (command_path, argv) that start the user's shell as a login shell."""
    if environ is None:
        environ = os.environ
    shell = environ.get("SHELL")
    if shell is None:
        try:
            shell = pwd.getpwuid(os.getuid()).pw_shell
        except KeyError as exc:
            raise LookupError(f"getpwuid: {exc}") from exc
    if not shell:
        # an empty shell means the Bourne shell
        shell = DEFAULT_SHELL
    name = shell.rsplit("/", 1)[-1]
    return shell, ["-" + name]


def child_environment(environ, colors):
    """Return the environment for the shell started on the pseudo-terminal."""
    env = dict(environ)
    env["TERM"] = "xterm-256color" if colors == 256 else "xterm"
    # ask ncurses for UTF-8 rather than ISO 2022 line drawing
    env["NCURSES_NO_UTF8_ACS"] = "1"
    # let GNU screen regard the session as top level
    env.pop("STY", None)
    return env


def initial_window_size(fd=0):
    """Return (columns, rows) of the terminal on fd, or 80x24 when unknown."""
    try:
        size = os.get_terminal_size(fd)
    except OSError:
        return DEFAULT_WINDOW_SIZE
    if size.columns == 0 or size.lines == 0:
        return DEFAULT_WINDOW_SIZE
    return size.columns, size.lines