"""Reading and writing simple ``KEY = VALUE`` configuration files."""

from __future__ import annotations

import os
import re
import string
import sys
from dataclasses import dataclass
from typing import Iterable

_FLOAT_RE = re.compile(
    r"[ \t\n\r\f\v]*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


class ConfigError(Exception):
    """Raised when a configuration file is unusable."""


@dataclass
class _Entry:
    key: str
    value: str
    touched: bool = False


def _strtod(text: str, pos: int = 0) -> tuple[float, int]:
    match = _FLOAT_RE.match(text, pos)
    if match is None:
        return 0.0, pos
    return float(match.group(1)), match.end()


def _trim(text: str) -> str:
    start, end = 0, len(text) - 1
    while start <= end:
        char = text[start]
        if char not in " \t":
            if char in "'\"":
                start += 1
            break
        start += 1
    while start <= end:
        char = text[end]
        if char not in " \t\n\r\0":
            if char in "'\"":
                end -= 1
            break
        end -= 1
    return text[start:end + 1]


def _parse_line(line: str) -> tuple[str, str] | None:
    line = line.split("#", 1)[0]
    if not line or "=" not in line:
        return None
    key_part, value_part = line.split("=", 1)
    key, value = _trim(key_part), _trim(value_part)
    if not key or not value:
        return None
    return key, value


class ConfigFile:
    """An ordered set of configuration entries that remembers which were read."""

    def __init__(self, entries: Iterable[tuple[str, str]] = ()) -> None:
        self._entries = [_Entry(key, value) for key, value in entries]

    @classmethod
    def load(cls, path: str | os.PathLike) -> "ConfigFile":
        """Read a file; a file that cannot be opened yields an empty config."""
        try:
            with open(path, encoding="utf-8", errors="replace") as handle:
                lines = handle.readlines()
        except OSError:
            return cls()

        pairs = [pair for pair in map(_parse_line, lines) if pair is not None]
        has_total_particles = any(
            key[:15].upper() == "TOTAL_PARTICLES" for key, _ in pairs
        )
        file_format = None
        for key, value in pairs:
            if key[:11].upper() == "FILE_FORMAT":
                file_format = value
        if (
            file_format is not None
            and file_format[:3].upper() == "KYF"
            and not has_total_particles
        ):
            raise ConfigError("TOTAL_PARTICLES is not set")
        return cls(pairs)

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> list[tuple[str, str]]:
        """All entries as (key, value) pairs, in file order."""
        return [(entry.key, entry.value) for entry in self._entries]

    def _lookup(self, key: str) -> str | None:
        for entry in self._entries:
            if entry.key == key:
                entry.touched = True
                return entry.value
        return None

    def _remember_default(self, key: str, value: str) -> None:
        self._entries.append(_Entry(key, value, touched=True))

    def to_string(self, key: str, default: str) -> str:
        """The value for ``key``, recording ``default`` when it is absent."""
        value = self._lookup(key)
        if value is None:
            self._remember_default(key, default)
            return default
        return value

    def to_real(self, key: str, default: float) -> float:
        """The leading number of the value for ``key``; 0.0 if it has none."""
        value = self._lookup(key)
        if value is None:
            self._remember_default(key, f"{default:.10e}")
            return default
        return _strtod(value)[0]

    def to_real3(self, key: str, default: str) -> tuple[float, float, float]:
        """Three numbers from the value, skipping any non-digit separators."""
        value = self._lookup(key)
        if value is None:
            self._remember_default(key, default)
            value = default
        results = []
        pos = 0
        for _ in range(3):
            while pos < len(value) and value[pos] not in string.digits:
                pos += 1
            if pos >= len(value):
                results.append(0.0)
                continue
            number, pos = _strtod(value, pos)
            results.append(number)
        return results[0], results[1], results[2]

    def syntax_check(self, prefix: str | None = None) -> list[str]:
        """Report keys that were never read, writing each message to stderr."""
        lead = f"{prefix} " if prefix is not None else ""
        messages = []
        for entry in self._entries:
            if entry.touched or not entry.key:
                continue
            duplicate = any(
                other is not entry and other.key.lower() == entry.key.lower()
                for other in self._entries
            )
            if duplicate:
                message = (
                    f'{lead}Duplicate config variable "{entry.key}". '
                    "Second and further instances ignored."
                )
            else:
                message = (
                    f'{lead}Config variable "{entry.key}" not understood; '
                    "please verify spelling."
                )
            messages.append(message)
            print(message, file=sys.stderr)
        return messages

    def write(self, path: str | os.PathLike) -> None:
        """Write every entry as a quoted ``"key" = "value"`` line."""
        try:
            with open(path, "w", encoding="utf-8") as handle:
                for entry in self._entries:
                    handle.write(f'"{entry.key}" = "{entry.value}"\n')
        except OSError as exc:
            raise ConfigError(f"Couldn't open file {path} for writing!") from exc