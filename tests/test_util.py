import os

import pytest

from tyunify.util import (
    CompilerBug,
    count_char_occurrences,
    find_range,
    get_cache_dir,
    give_up,
    join_paths,
    multiset_eq,
    prefix,
    read_entire_file,
)


@pytest.mark.parametrize(
    "as_, bs, expected",
    [
        ([1, 2, 3], [3, 2, 1], True),
        ([1, 1, 2], [1, 2, 2], False),
        ([], [], True),
        ([1, 2], [1, 2, 3], False),
        (["a", "b", "a"], ["a", "a", "b"], True),
    ],
)
def test_multiset_eq(as_, bs, expected):
    assert multiset_eq(as_, bs) is expected


def test_multiset_eq_symmetric():
    a = [5, 7, 5, 9]
    b = [9, 5, 7, 5]
    assert multiset_eq(a, b) == multiset_eq(b, a)
    assert multiset_eq(a, b)


def test_find_range_found_matches_slice():
    haystack = [4, 8, 15, 16, 23, 42]
    needle = [16, 23]
    i = find_range(haystack, needle)
    assert haystack[i : i + len(needle)] == needle


def test_find_range_first_occurrence():
    haystack = [1, 2, 1, 2]
    assert find_range(haystack, [1, 2]) == 0


def test_find_range_not_found_returns_length():
    haystack = [1, 2, 3]
    assert find_range(haystack, [3, 1]) == len(haystack)


def test_find_range_needle_longer_than_haystack():
    haystack = [1, 2]
    assert find_range(haystack, [1, 2, 3]) == len(haystack)


def test_find_range_empty_haystack():
    assert find_range([], []) == 0


def test_find_range_works_on_strings():
    text = "hello world"
    i = find_range(text, "world")
    assert text[i:].startswith("world")


def test_prefix():
    assert prefix("abc", "abcdef")
    assert not prefix("abd", "abcdef")
    assert prefix("", "anything")
    assert not prefix("longer", "long")


def test_count_char_occurrences():
    data = "a,b,,c"
    assert count_char_occurrences(data, ",") == len(data.split(",")) - 1
    assert count_char_occurrences("", "x") == 0


def test_count_char_occurrences_rejects_multi_char():
    with pytest.raises(ValueError):
        count_char_occurrences("abc", "ab")


def test_join_paths_uses_separator():
    joined = join_paths("root", ".cache", "prog")
    assert joined.split(os.sep) == ["root", ".cache", "prog"]


def test_join_paths_single():
    assert join_paths("only") == "only"


def test_get_cache_dir_with_xdg(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CACHE_DIR", str(tmp_path))
    result = get_cache_dir("tyunify-test-xdg")
    assert result == tmp_path / "tyunify-test-xdg"
    assert result.is_dir()


def test_get_cache_dir_with_home(tmp_path, monkeypatch):
    monkeypatch.delenv("XDG_CACHE_DIR", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    result = get_cache_dir("tyunify-test-home")
    assert result == tmp_path / ".cache" / "tyunify-test-home"
    assert result.is_dir()


def test_get_cache_dir_is_remembered(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CACHE_DIR", str(tmp_path / "first"))
    first = get_cache_dir("tyunify-test-cached")
    monkeypatch.setenv("XDG_CACHE_DIR", str(tmp_path / "second"))
    second = get_cache_dir("tyunify-test-cached")
    assert first == second


def test_read_entire_file_round_trip(tmp_path):
    content = "(sig (Fn I32))\n(fun test () 2)"
    path = tmp_path / "input.pq"
    path.write_bytes(content.encode("utf-8"))
    assert read_entire_file(path) == content


def test_read_entire_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_entire_file(tmp_path / "missing.pq")


def test_give_up_raises_compiler_bug():
    with pytest.raises(CompilerBug) as info:
        give_up("Tried to access invalid vector element")
    message = str(info.value)
    assert "Tried to access invalid vector element" in message
    assert "This is a compiler bug! Giving up." in message