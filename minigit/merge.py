"""History walking and three-way merging of snapshots."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Union

from minigit.commit import Commit

CommitLoader = Callable[[str], Optional[Commit]]
BlobReader = Callable[[str], bytes]
Content = Union[str, bytes]

CONFLICT_HEAD = b"<<<<<<< HEAD\n"
CONFLICT_BASE = b"||||||| base\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_TAIL = b">>>>>>> MERGE_BRANCH\n"


@dataclass
class MergeResult:
    """Outcome of merging two snapshots against their common ancestor.

    ``snapshot`` maps paths to blob hashes; a conflicted path maps to an
    empty string. ``conflict_files`` holds the text to write for each
    conflicted path, and ``messages`` the report of what happened per path.
    """

    snapshot: Dict[str, str] = field(default_factory=dict)
    conflict_files: Dict[str, bytes] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)

    @property
    def conflicts_occurred(self) -> bool:
        """Whether any path ended in conflict."""
        return bool(self.conflict_files)


def _load(load_commit: CommitLoader, commit_hash: str) -> Optional[Commit]:
    commit = load_commit(commit_hash)
    if commit is None or not commit.hash:
        return None
    return commit


def _parents(commit: Commit) -> Iterator[str]:
    if commit.parent_hash:
        yield commit.parent_hash
    if commit.second_parent_hash:
        yield commit.second_parent_hash


def _walk(start: str, load_commit: CommitLoader) -> Iterator[str]:
    """Yield ``start`` and every reachable ancestor, breadth first."""
    queue = deque([start])
    seen = {start}
    while queue:
        current = queue.popleft()
        yield current
        commit = _load(load_commit, current)
        if commit is None:
            continue
        for parent in _parents(commit):
            if parent not in seen:
                seen.add(parent)
                queue.append(parent)


def is_ancestor(ancestor_hash: str, descendant_hash: str, load_commit: CommitLoader) -> bool:
    """Tell whether ``ancestor_hash`` is reachable from ``descendant_hash``.

    An empty ancestor counts as an ancestor of everything; an empty
    descendant has no ancestors; a commit is its own ancestor.
    """
    if not ancestor_hash:
        return True
    if not descendant_hash:
        return False
    return any(h == ancestor_hash for h in _walk(descendant_hash, load_commit))


def find_lca(commit1_hash: str, commit2_hash: str, load_commit: CommitLoader) -> str:
    """Return the common ancestor of two commits with the latest timestamp, or ``""``."""
    if not commit1_hash or not commit2_hash:
        return ""
    if commit1_hash == commit2_hash:
        return commit1_hash

    ancestors1 = set(_walk(commit1_hash, load_commit))
    candidates = [h for h in _walk(commit2_hash, load_commit) if h in ancestors1]

    best = ""
    latest = 0
    for candidate_hash in candidates:
        candidate = _load(load_commit, candidate_hash)
        if candidate is None:
            continue
        if candidate.timestamp > latest:
            latest = candidate.timestamp
            best = candidate_hash
    return best


def _to_bytes(content: Content) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


def conflict_text(current_content: Content, other_content: Content, lca_content: Content) -> bytes:
    """Build the file content with conflict markers around both sides."""
    current = _to_bytes(current_content)
    other = _to_bytes(other_content)
    base = _to_bytes(lca_content)
    parts = [CONFLICT_HEAD, current]
    if base:
        parts += [CONFLICT_BASE, base]
    parts += [CONFLICT_SEPARATOR, other, CONFLICT_TAIL]
    return b"".join(parts)


def apply_merge_changes(
    current_snapshot: Mapping[str, str],
    other_snapshot: Mapping[str, str],
    lca_snapshot: Mapping[str, str],
    read_blob: BlobReader,
) -> MergeResult:
    """Merge ``other_snapshot`` into ``current_snapshot`` relative to ``lca_snapshot``."""
    result = MergeResult(snapshot=dict(current_snapshot))
    merged = result.snapshot

    def conflict(path: str, current: bytes, other: bytes, base: bytes) -> None:
        result.conflict_files[path] = conflict_text(current, other, base)
        merged[path] = ""

    all_paths = sorted(set(current_snapshot) | set(other_snapshot) | set(lca_snapshot))
    for path in all_paths:
        cur = current_snapshot.get(path, "")
        oth = other_snapshot.get(path, "")
        base = lca_snapshot.get(path, "")

        if not base and not cur and oth:
            merged[path] = oth
            result.messages.append(f"Added file: {path}")
        elif base and not cur and oth:
            result.messages.append(
                f"CONFLICT (delete/modify): {path} deleted in current, modified in other."
            )
            conflict(path, b"", read_blob(oth), read_blob(base))
        elif base and cur and not oth:
            result.messages.append(
                f"CONFLICT (modify/delete): {path} modified in current, deleted in other."
            )
            conflict(path, read_blob(cur), b"", read_blob(base))
        elif base and not cur and not oth:
            merged.pop(path, None)
            result.messages.append(f"Deleted file: {path}")
        elif cur and base and cur != base and oth == base:
            result.messages.append(f"Modified file (current): {path}")
        elif oth and base and oth != base and cur == base:
            merged[path] = oth
            result.messages.append(f"Modified file (other): {path}")
        elif cur and cur != base and oth != base and cur == oth:
            merged[path] = cur
            result.messages.append(f"Modified file (both same): {path}")
        elif cur and oth and cur != oth and cur != base and oth != base:
            result.messages.append(f"CONFLICT (content): both modified {path}")
            conflict(path, read_blob(cur), read_blob(oth), read_blob(base))
    return result