import pytest

from minigit.commit import Commit
from minigit.merge import (
    MergeResult,
    apply_merge_changes,
    conflict_text,
    find_lca,
    is_ancestor,
)


def _graph(*commits):
    store = {c.hash: c for c in commits}
    return store.get


def _c(h, parent="", parent2="", ts=1):
    return Commit(hash=h, parent_hash=parent, second_parent_hash=parent2, timestamp=ts)


@pytest.fixture
def diamond():
    # a <- b <- d, a <- c <- d (d is a merge)
    return _graph(
        _c("a", ts=1),
        _c("b", "a", ts=2),
        _c("c", "a", ts=3),
        _c("d", "b", "c", ts=4),
        _c("x", ts=5),
    )


BLOBS = {"h1": b"one\n", "h2": b"two\n", "h3": b"three\n"}


def read_blob(h):
    return BLOBS.get(h, b"")


def test_is_ancestor_empty_cases(diamond):
    assert is_ancestor("", "a", diamond) is True
    assert is_ancestor("a", "", diamond) is False
    assert is_ancestor("b", "b", diamond) is True


def test_is_ancestor_through_both_parents(diamond):
    assert is_ancestor("a", "d", diamond) is True
    assert is_ancestor("c", "d", diamond) is True
    assert is_ancestor("b", "d", diamond) is True
    assert is_ancestor("d", "a", diamond) is False
    assert is_ancestor("b", "c", diamond) is False
    assert is_ancestor("x", "d", diamond) is False


def test_is_ancestor_with_missing_commit():
    load = _graph(_c("b", "missing"))
    assert is_ancestor("missing", "b", load) is True
    assert is_ancestor("other", "b", load) is False


def test_find_lca_basic(diamond):
    assert find_lca("b", "c", diamond) == "a"
    assert find_lca("d", "c", diamond) == "c"
    assert find_lca("b", "b", diamond) == "b"


def test_find_lca_no_common_or_empty(diamond):
    assert find_lca("x", "d", diamond) == ""
    assert find_lca("", "d", diamond) == ""
    assert find_lca("d", "", diamond) == ""


def test_find_lca_prefers_latest_timestamp():
    load = _graph(
        _c("root", ts=1),
        _c("p", "root", ts=10),
        _c("q", "root", ts=20),
        _c("m1", "p", "q", ts=30),
        _c("m2", "q", "p", ts=31),
    )
    assert find_lca("m1", "m2", load) == "q"


def test_find_lca_ignores_zero_timestamp():
    load = _graph(_c("r", ts=0), _c("s", "r", ts=0), _c("t", "r", ts=0))
    assert find_lca("s", "t", load) == ""


def test_conflict_text_with_base():
    text = conflict_text(b"mine\n", b"theirs\n", b"base\n")
    assert text == (
        b"<<<<<<< HEAD\nmine\n||||||| base\nbase\n=======\ntheirs\n>>>>>>> MERGE_BRANCH\n"
    )


def test_conflict_text_without_base_and_str_input():
    text = conflict_text("mine\n", "", "")
    assert text == b"<<<<<<< HEAD\nmine\n=======\n>>>>>>> MERGE_BRANCH\n"
    assert b"||||||| base" not in text


def test_added_in_other():
    result = apply_merge_changes({}, {"f": "h1"}, {}, read_blob)
    assert result.snapshot == {"f": "h1"}
    assert result.messages == ["Added file: f"]
    assert result.conflicts_occurred is False


def test_added_in_current_only_is_kept():
    result = apply_merge_changes({"f": "h1"}, {}, {}, read_blob)
    assert result.snapshot == {"f": "h1"}
    assert result.messages == []


def test_deleted_in_both():
    result = apply_merge_changes({}, {}, {"f": "h1"}, read_blob)
    assert result.snapshot == {}
    assert result.messages == ["Deleted file: f"]


def test_modified_in_current_only():
    result = apply_merge_changes({"f": "h2"}, {"f": "h1"}, {"f": "h1"}, read_blob)
    assert result.snapshot == {"f": "h2"}
    assert result.messages == ["Modified file (current): f"]


def test_modified_in_other_only():
    result = apply_merge_changes({"f": "h1"}, {"f": "h2"}, {"f": "h1"}, read_blob)
    assert result.snapshot == {"f": "h2"}
    assert result.messages == ["Modified file (other): f"]


def test_modified_in_both_same():
    result = apply_merge_changes({"f": "h2"}, {"f": "h2"}, {"f": "h1"}, read_blob)
    assert result.snapshot == {"f": "h2"}
    assert result.messages == ["Modified file (both same): f"]
    assert not result.conflicts_occurred


def test_content_conflict():
    result = apply_merge_changes({"f": "h2"}, {"f": "h3"}, {"f": "h1"}, read_blob)
    assert result.conflicts_occurred
    assert result.snapshot == {"f": ""}
    assert result.messages == ["CONFLICT (content): both modified f"]
    assert result.conflict_files["f"] == conflict_text(b"two\n", b"three\n", b"one\n")


def test_delete_modify_conflict():
    result = apply_merge_changes({}, {"f": "h2"}, {"f": "h1"}, read_blob)
    assert result.conflicts_occurred
    assert result.snapshot == {"f": ""}
    assert result.conflict_files["f"] == conflict_text(b"", b"two\n", b"one\n")
    assert result.messages[0].startswith("CONFLICT (delete/modify): f")


def test_modify_delete_conflict():
    result = apply_merge_changes({"f": "h2"}, {}, {"f": "h1"}, read_blob)
    assert result.snapshot == {"f": ""}
    assert result.conflict_files["f"] == conflict_text(b"two\n", b"", b"one\n")
    assert result.messages[0].startswith("CONFLICT (modify/delete): f")


def test_inputs_not_mutated_and_paths_sorted():
    current = {"b": "h1", "a": "h1"}
    other = {"b": "h2", "a": "h1", "c": "h3"}
    base = {"a": "h1", "b": "h1"}
    result = apply_merge_changes(current, other, base, read_blob)
    assert current == {"b": "h1", "a": "h1"}
    assert result.snapshot == {"a": "h1", "b": "h2", "c": "h3"}
    assert result.messages == ["Modified file (other): b", "Added file: c"]


def test_merge_result_defaults():
    result = MergeResult()
    assert result.conflicts_occurred is False
    assert result.snapshot == {} and result.messages == []