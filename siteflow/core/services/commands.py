"""
Command builder — structured argv for local tools, quoted scripts for ssh.

Local commands are executed as argv lists, never through a shell. Remote
commands have to travel as one string to the remote shell, so every
argument is quoted individually with ``shlex.quote`` and only the
operators added by ``Script`` (``&&``, ``||``, ``|``, ``>>``) stay
unquoted. Operator-supplied values (host, user, domain, database
credentials) are additionally validated before they get here.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass


@dataclass(frozen=True)
class Command:
    """One program invocation."""

    program: str
    args: tuple[str, ...] = ()

    @classmethod
    def of(cls, program: str, *args: str) -> Command:
        return cls(program, tuple(str(a) for a in args))

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def render(self) -> str:
        return shlex.join(self.argv)

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Script:
    """A remote shell command line assembled from quoted Commands."""

    text: str

    @staticmethod
    def _text(part: Command | Script) -> str:
        return part.text if isinstance(part, Script) else part.render()

    @classmethod
    def of(cls, command: Command) -> Script:
        return cls(command.render())

    @classmethod
    def all_of(cls, *parts: Command | Script) -> Script:
        """Run parts in order, stopping at the first failure (``&&``)."""
        return cls(" && ".join(cls._text(p) for p in parts))

    @classmethod
    def either(cls, first: Command | Script, fallback: Command | Script) -> Script:
        return cls(f"{cls._text(first)} || {cls._text(fallback)}")

    @classmethod
    def pipe(cls, source: Command | Script, sink: Command | Script) -> Script:
        return cls(f"{cls._text(source)} | {cls._text(sink)}")

    @classmethod
    def append_to(cls, source: Command | Script, path: str) -> Script:
        return cls(f"{cls._text(source)} >> {shlex.quote(path)}")

    @classmethod
    def in_dir(cls, directory: str, *parts: Command | Script) -> Script:
        return cls.all_of(Command.of("cd", directory), *parts)

    def render(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text


# ── Validation of operator input ────────────────────────────────────

_HOST_RE = re.compile(
    r"^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.(?!-)[A-Za-z0-9-]{1,63}(?<!-))*$"
)
_IPV4_RE = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")
_USER_RE = re.compile(r"^[a-z_][a-z0-9_-]{0,31}$")
_DB_IDENT_RE = re.compile(r"^[A-Za-z0-9_]{1,64}$")


def validate_host(value: str) -> str:
    value = value.strip()
    m = _IPV4_RE.match(value)
    if m:
        if all(0 <= int(octet) <= 255 for octet in m.groups()):
            return value
        raise ValueError(f"{value!r} is not a valid IPv4 address")
    if not _HOST_RE.match(value):
        raise ValueError(f"{value!r} is not a valid host name")
    return value.lower()


def validate_domain(value: str) -> str:
    value = value.strip().lower()
    if value.startswith(("http://", "https://")):
        raise ValueError("Enter the bare domain without a scheme, e.g. www.example.com")
    if "." not in value or _IPV4_RE.match(value) or not _HOST_RE.match(value):
        raise ValueError(f"{value!r} is not a valid domain name")
    return value


def validate_user(value: str) -> str:
    value = value.strip()
    if not _USER_RE.match(value):
        raise ValueError(
            f"{value!r} is not a valid account name (lowercase letters, digits, '-' and '_')"
        )
    return value


def validate_db_identifier(value: str) -> str:
    value = value.strip()
    if not _DB_IDENT_RE.match(value):
        raise ValueError(
            f"{value!r} is not a valid database identifier (letters, digits and '_')"
        )
    return value


def validate_password(value: str) -> str:
    if not value:
        raise ValueError("The password must not be empty")
    if any(ch in value for ch in "\r\n\0"):
        raise ValueError("The password must not contain line breaks")
    return value
