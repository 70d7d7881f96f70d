"""Tests for validation rules, rule strings, results and content sniffing."""

import pytest

from wren.data import SQLiteConnection
from wren.errors import ConfigurationError
from wren.http import UploadFile
from wren.validation import (
    MessageBag,
    ValidationResult,
    alpha_numeric,
    check_mime,
    email,
    file,
    image,
    integer,
    matches,
    max_length,
    mime,
    min_length,
    number,
    one_of,
    optional,
    parse_rules,
    required,
    sniff_mime,
    string,
    unique,
    url,
    validate,
)
from wren.validation.mime import normalize_mime

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 16
PDF = b"%PDF-1.7\n"


def _upload(content: bytes, filename: str = "upload.bin") -> UploadFile:
    return UploadFile(filename, "application/octet-stream", content)


@pytest.fixture
def conn():
    connection = SQLiteConnection.open(":memory:")
    connection.execute_script(
        """
        CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT);
        INSERT INTO users (id, email) VALUES (1, 'taken@example.com');
        """
    )
    yield connection
    connection.close()


# ---------------------------------------------------------------------------
# Individual rules
# ---------------------------------------------------------------------------


class TestPresence:
    def test_required(self) -> None:
        assert required("x") is None
        assert required("") == "This field is required"
        assert required("   ") == "This field is required"
        assert required(None) == "This field is required"

    def test_required_accepts_upload(self) -> None:
        assert required(_upload(b"")) is None


class TestTypes:
    def test_string(self) -> None:
        assert string("x") is None
        assert string(_upload(b"")) == "Must be text"

    def test_integer(self) -> None:
        assert integer("42") is None
        assert integer("-3") is None
        assert integer("4.2") == "Must be a whole number"
        assert integer(None) == "Must be a whole number"

    def test_number(self) -> None:
        assert number("4.2") is None
        assert number("1e3") is None
        assert number("abc") == "Must be a number"

    def test_alpha_numeric(self) -> None:
        assert alpha_numeric("abc123") is None
        assert alpha_numeric("abc 123") == "Must contain only letters and digits"
        assert alpha_numeric("héllo") is not None
        assert alpha_numeric("") is not None


class TestLength:
    def test_max_length(self) -> None:
        check = max_length(3)
        assert check("abc") is None
        assert check("abcd") == "Must be at most 3 characters"

    def test_min_length(self) -> None:
        check = min_length(3)
        assert check("abc") is None
        assert check("ab") == "Must be at least 3 characters"


class TestFormat:
    @pytest.mark.parametrize("value", ["a@b.co", "first.last+tag@example.org"])
    def test_valid_email(self, value) -> None:
        assert email(value) is None

    @pytest.mark.parametrize("value", ["", "no-at-sign", "a@b", "a@@b.co"])
    def test_invalid_email(self, value) -> None:
        assert email(value) == "Must be a valid email address"

    def test_url(self) -> None:
        assert url("https://example.com/path") is None
        assert url("ftp://example.com") == "Must be a valid URL"

    def test_matches(self) -> None:
        check = matches(r"^\d{4}$", "Must be a year")
        assert check("2024") is None
        assert check("24") == "Must be a year"

    def test_one_of(self) -> None:
        check = one_of("draft", "published")
        assert check("draft") is None
        assert check("deleted") == "Must be one of: draft, published"


class TestFiles:
    def test_file(self) -> None:
        assert file(_upload(b"x")) is None
        assert file("x") == "Must be a file"

    def test_image_judged_by_content(self) -> None:
        assert image(_upload(PNG, "photo.png")) is None
        assert image(_upload(PDF, "photo.png")) == "Must be an image"
        assert image("photo.png") == "Must be an image"

    def test_mime(self) -> None:
        check = mime("png", "image/jpeg")
        assert check(_upload(PNG)) is None
        assert check(_upload(JPEG)) is None
        assert check(_upload(PDF)) == "Must be a file of type: png, image/jpeg"


class TestUnique:
    def test_taken(self, conn) -> None:
        assert unique(conn, "users", "email")("taken@example.com") == "Has already been taken"

    def test_free(self, conn) -> None:
        assert unique(conn, "users", "email")("free@example.com") is None

    def test_ignore_current_row(self, conn) -> None:
        assert unique(conn, "users", "email", ignore=1)("taken@example.com") is None

    def test_lazy_connection(self, conn) -> None:
        calls: list[int] = []

        def get_conn():
            calls.append(1)
            return conn

        check = unique(get_conn, "users", "email")
        assert calls == []
        assert check("taken@example.com") is not None
        assert calls == [1]


# ---------------------------------------------------------------------------
# Rule strings
# ---------------------------------------------------------------------------


class TestParseRules:
    def test_simple(self) -> None:
        assert parse_rules("required|email") == [required, email]

    def test_parameterized(self) -> None:
        min_check, max_check = parse_rules("min:2|max:4")
        assert min_check("a") is not None
        assert max_check("abcde") is not None
        assert max_check("abcd") is None

    def test_in(self) -> None:
        (check,) = parse_rules("in:a,b")
        assert check("a") is None
        assert check("c") is not None

    def test_whitespace_and_empty_parts(self) -> None:
        assert parse_rules(" required || email ") == [required, email]

    @pytest.mark.parametrize("spec", ["bogus", "size:3", "min:x"])
    def test_invalid(self, spec) -> None:
        with pytest.raises(ConfigurationError):
            parse_rules(spec)

    def test_unique_needs_db(self) -> None:
        with pytest.raises(ConfigurationError, match="database"):
            parse_rules("unique:users,email")

    def test_unique_needs_table_and_column(self, conn) -> None:
        with pytest.raises(ConfigurationError):
            parse_rules("unique:users", db=conn)

    def test_unique_with_ignore(self, conn) -> None:
        (check,) = parse_rules("unique:users,email,1", db=conn)
        assert check("taken@example.com") is None


# ---------------------------------------------------------------------------
# validate()
# ---------------------------------------------------------------------------


class TestValidate:
    def test_valid(self) -> None:
        result = validate({"title": "Hello", "extra": "x"}, {"title": [required, max_length(10)]})
        assert result
        assert result.is_valid
        assert result.data == {"title": "Hello"}

    def test_collects_all_messages_per_field(self) -> None:
        result = validate({"code": "a b"}, {"code": "alpha_numeric|min:5"})
        assert not result
        assert result.errors.messages("code") == [
            "Must contain only letters and digits",
            "Must be at least 5 characters",
        ]
        assert "code" not in result.data

    def test_required_stops_field(self) -> None:
        result = validate({}, {"email": "required|email"})
        assert result.errors["email"] == ["This field is required"]

    def test_optional_skips_empty(self) -> None:
        result = validate({"website": ""}, {"website": [optional, url]})
        assert result
        assert result.data == {"website": ""}

    def test_optional_checks_present(self) -> None:
        result = validate({"website": "nope"}, {"website": "optional|url"})
        assert result.errors.first("website") == "Must be a valid URL"

    def test_string_rules_with_db(self, conn) -> None:
        result = validate(
            {"email": "taken@example.com"},
            {"email": "required|email|unique:users,email"},
            db=conn,
        )
        assert result.errors.first("email") == "Has already been taken"


class TestMessageBag:
    def test_empty_is_falsy(self) -> None:
        assert not MessageBag()

    def test_accessors(self) -> None:
        bag = MessageBag()
        bag.add("email", "a")
        bag.add("email", "b")
        bag.add("name", "c")
        assert bag
        assert bag.has("email")
        assert not bag.has("title")
        assert bag.first("email") == "a"
        assert bag.first("title", "-") == "-"
        assert bag.all() == ["a", "b", "c"]
        assert bag.to_dict() == {"email": ["a", "b"], "name": ["c"]}

    def test_roundtrip_through_dict(self) -> None:
        bag = MessageBag({"email": ["a"]})
        assert MessageBag(bag.to_dict()) == bag

    def test_result_default_errors(self) -> None:
        assert ValidationResult(data={}).is_valid


# ---------------------------------------------------------------------------
# Content sniffing
# ---------------------------------------------------------------------------


class TestSniffMime:
    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (PNG, "image/png"),
            (JPEG, "image/jpeg"),
            (b"GIF89a...", "image/gif"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (PDF, "application/pdf"),
            (b'<?xml version="1.0"?><svg xmlns="http://www.w3.org/2000/svg"/>', "image/svg+xml"),
            (b"  <svg></svg>", "image/svg+xml"),
        ],
    )
    def test_known(self, data, expected) -> None:
        assert sniff_mime(data) == expected

    def test_webp_needs_riff(self) -> None:
        assert sniff_mime(b"XXXX\x00\x00\x00\x00WEBP") is None

    def test_xml_without_svg(self) -> None:
        assert sniff_mime(b"<?xml version='1.0'?><feed/>") is None

    def test_unknown(self) -> None:
        assert sniff_mime(b"plain text") is None
        assert sniff_mime(b"") is None

    def test_normalize(self) -> None:
        assert normalize_mime(".PNG") == "image/png"
        assert normalize_mime("jpg") == "image/jpeg"
        assert normalize_mime("image/gif") == "image/gif"

    def test_check_mime(self) -> None:
        assert check_mime(PNG, ["png"])
        assert not check_mime(PNG, ["jpg", "gif"])
        assert not check_mime(b"???", ["png"])
