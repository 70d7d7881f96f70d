"""Tests for path normalization and segment matching."""

from wren.routing.matcher import is_placeholder, match_path, normalize_path, placeholders
from wren.routing.route import NO_MATCH, MatchResult


class TestNormalizePath:
    def test_strips_slashes(self) -> None:
        assert normalize_path("/user/21/") == "user/21"

    def test_root_is_empty(self) -> None:
        assert normalize_path("/") == ""
        assert normalize_path("") == ""

    def test_drops_unsafe_characters(self) -> None:
        assert normalize_path("/a b/c") == "ab/c"

    def test_keeps_braces(self) -> None:
        assert normalize_path("/user/{id}") == "user/{id}"


class TestPlaceholders:
    def test_is_placeholder(self) -> None:
        assert is_placeholder("{id}")
        assert not is_placeholder("id")
        assert not is_placeholder("{")

    def test_names_in_order(self) -> None:
        assert placeholders("/user/{id}/name/{name}") == ["id", "name"]

    def test_no_placeholders(self) -> None:
        assert placeholders("/about") == []


class TestMatchPath:
    def test_literal_match(self) -> None:
        result = match_path("about", "about")
        assert result
        assert result.params == ()

    def test_captures_in_order(self) -> None:
        result = match_path("user/{id}/name/{name}", "user/21/name/johnjoe")
        assert result == MatchResult(matched=True, params=("21", "johnjoe"))

    def test_segment_count_must_agree(self) -> None:
        assert match_path("user/{id}", "user/21/extra") is NO_MATCH
        assert match_path("user/{id}", "user") is NO_MATCH

    def test_literal_mismatch(self) -> None:
        assert not match_path("user/{id}", "users/21")

    def test_placeholder_does_not_span_segments(self) -> None:
        assert not match_path("files/{name}", "files/a/b")

    def test_root_matches_only_root(self) -> None:
        assert match_path("", "")
        assert not match_path("", "about")

    def test_no_match_is_falsy(self) -> None:
        assert not NO_MATCH
        assert NO_MATCH.params == ()
