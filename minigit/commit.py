"""The commit object and its on-disk text format."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Union

from minigit.utils import MiniGitError

SNAPSHOT_MARKER = "---snapshot---"

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def _parse_timestamp(text: str) -> int:
    match = _LEADING_INT.match(text)
    if match is None:
        raise MiniGitError(f"Invalid commit timestamp: {text!r}")
    return int(match.group())


@dataclass
class Commit:
    """A recorded snapshot of tracked files with its metadata."""

    hash: str = ""
    parent_hash: str = ""
    second_parent_hash: str = ""
    message: str = ""
    author: str = ""
    timestamp: int = 0
    snapshot: Dict[str, str] = field(default_factory=dict)

    def serialize(self) -> str:
        """Return the text stored in the object file for this commit."""
        lines = [f"parent: {self.parent_hash}"]
        if self.second_parent_hash:
            lines.append(f"parent2: {self.second_parent_hash}")
        lines.append(f"message: {self.message}")
        lines.append(f"author: {self.author}")
        lines.append(f"timestamp: {self.timestamp}")
        lines.append(SNAPSHOT_MARKER)
        lines.extend(f"{path} {blob}" for path, blob in sorted(self.snapshot.items()))
        return "\n".join(lines) + "\n"

    @classmethod
    def parse(cls, commit_hash: str, data: Union[str, bytes]) -> "Commit":
        """Build a commit named ``commit_hash`` from its serialized text."""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="surrogateescape")
        commit = cls(hash=commit_hash)
        in_snapshot = False
        for line in data.split("\n"):
            if line.startswith("parent: "):
                commit.parent_hash = line[len("parent: "):]
            elif line.startswith("parent2: "):
                commit.second_parent_hash = line[len("parent2: "):]
            elif line.startswith("message: "):
                commit.message = line[len("message: "):]
            elif line.startswith("author: "):
                commit.author = line[len("author: "):]
            elif line.startswith("timestamp: "):
                commit.timestamp = _parse_timestamp(line[len("timestamp: "):])
            elif line == SNAPSHOT_MARKER:
                in_snapshot = True
            elif in_snapshot:
                path, sep, blob = line.partition(" ")
                if sep:
                    commit.snapshot[path] = blob
        return commit

    def short_hash(self) -> str:
        """The first seven characters of the commit hash."""
        return self.hash[:7]

    def is_merge(self) -> bool:
        """Whether the commit has a second parent."""
        return bool(self.second_parent_hash)