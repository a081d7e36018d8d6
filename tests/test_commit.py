import pytest

from minigit.commit import Commit
from minigit.utils import MiniGitError


def _sample(**overrides):
    values = dict(
        hash="abcdef1234567890",
        parent_hash="1111111111",
        second_parent_hash="",
        message="first commit",
        author="default_user",
        timestamp=1700000000,
        snapshot={"b.txt": "bbb", "a.txt": "aaa"},
    )
    values.update(overrides)
    return Commit(**values)


def test_serialize_layout():
    text = _sample().serialize()
    assert text == (
        "parent: 1111111111\n"
        "message: first commit\n"
        "author: default_user\n"
        "timestamp: 1700000000\n"
        "---snapshot---\n"
        "a.txt aaa\n"
        "b.txt bbb\n"
    )


def test_serialize_includes_second_parent_only_when_set():
    assert "parent2: " not in _sample().serialize()
    merged = _sample(second_parent_hash="2222").serialize()
    assert merged.splitlines()[1] == "parent2: 2222"


def test_round_trip():
    original = _sample(second_parent_hash="2222")
    parsed = Commit.parse(original.hash, original.serialize())
    assert parsed == original


def test_round_trip_from_bytes():
    original = _sample()
    parsed = Commit.parse(original.hash, original.serialize().encode("utf-8"))
    assert parsed == original


def test_parse_empty_data_gives_defaults():
    parsed = Commit.parse("h", "")
    assert parsed == Commit(hash="h")


def test_parse_ignores_snapshot_lines_without_space():
    data = "parent: \nmessage: m\nauthor: a\ntimestamp: 5\n---snapshot---\nnospace\nf.txt blob\n"
    parsed = Commit.parse("h", data)
    assert parsed.snapshot == {"f.txt": "blob"}
    assert parsed.timestamp == 5
    assert parsed.parent_hash == ""


def test_parse_lines_before_marker_are_not_snapshot():
    data = "stray line\nparent: p\n---snapshot---\n"
    assert Commit.parse("h", data).snapshot == {}


def test_parse_bad_timestamp_raises():
    with pytest.raises(MiniGitError):
        Commit.parse("h", "timestamp: soon\n")


def test_short_hash_and_merge_flag():
    commit = _sample()
    assert commit.short_hash() == commit.hash[:7]
    assert commit.is_merge() is False
    assert _sample(second_parent_hash="x").is_merge() is True


def test_default_snapshots_are_independent():
    first = Commit()
    second = Commit()
    first.snapshot["a"] = "b"
    assert second.snapshot == {}