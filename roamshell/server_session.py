"""Login-session chores for the server: message of the day, utmp, greeting."""

import os
import pwd
import shutil
import sys
from dataclasses import dataclass

SESSION_PREFIX = "roamshell "


@dataclass(frozen=True)
class UtmpEntry:
    """The parts of a login record needed to spot detached sessions."""

    user: str
    host: str
    line: str
    is_user_process: bool = True


def print_motd(path, out=None):
    """Copy the file at path to the binary stream out; return False if unreadable."""
    if out is None:
        out = sys.stdout.buffer
    try:
        motd = open(path, "rb")
    except OSError:
        return False
    with motd:
        try:
            shutil.copyfileobj(motd, out)
        except OSError:
            # errors while copying are not reported
            pass
    return True


def motd_hushed(home=None):
    """Return True when a .hushlogin file exists in home (or the current directory)."""
    path = ".hushlogin" if home is None else os.path.join(home, ".hushlogin")
    return os.path.lexists(path)


def utmp_entry_name(pid=None):
    """Return the utmp host text marking a session not attached to a client."""
    if pid is None:
        pid = os.getpid()
    return f"{SESSION_PREFIX}[{pid}]"


def _device_exists(line):
    return os.path.lexists("/dev/" + line)


def find_unattached(entries, username, ignore_entry, device_exists=_device_exists):
    """Return the host texts of this user's detached sessions, in record order."""
    found = []
    for entry in entries:
        if not entry.is_user_process or entry.user != username:
            continue
        text = entry.host
        if (
            text.startswith(SESSION_PREFIX)
            and text.endswith("]")
            and text != ignore_entry
            and device_exists(entry.line)
        ):
            found.append(text)
    return found


def unattached_warning(sessions):
    """Return the warning about detached sessions, or "" when there are none."""
    sessions = list(sessions)
    if not sessions:
        return ""
    if len(sessions) == 1:
        return (
            "\033[37;44mRoamshell: You have a detached Roamshell session on this "
            f"server ({sessions[0]}).\033[m\n\n"
        )
    listing = "".join(f"        - {text}\n" for text in sessions)
    return (
        f"\033[37;44mRoamshell: You have {len(sessions)} detached Roamshell "
        f"sessions on this server, with PIDs:\n{listing}\033[m\n"
    )


def connect_message(port, key):
    """Return the line that tells the client wrapper where to connect."""
    return f"ROAMSHELL CONNECT {port} {key}\n"


def chdir_homedir(environ=None):
    """Change to the home directory and set PWD; return it, or None on failure."""
    if environ is None:
        environ = os.environ
    home = environ.get("HOME")
    if home is None:
        try:
            home = pwd.getpwuid(os.getuid()).pw_dir
        except KeyError as exc:
            print(f"getpwuid: {exc}", file=sys.stderr)
            return None
    try:
        os.chdir(home)
    except OSError as exc:
        print(f"chdir: {os.strerror(exc.errno or 0)}", file=sys.stderr)
    environ["PWD"] = home
    return home