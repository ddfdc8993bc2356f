import datetime

from blogo.errors import ParseError, ValidationError
from blogo.services.frontmatter_parser import parse_post_file, split_frontmatter, validate_frontmatter


def test_parse_post_file_returns_frontmatter_and_body():
    text = "---\ntitle: Hello\ndate: 2024-01-05\ntags:\n  - Python\n---\n# Heading\n\nBody text.\n"

    result = parse_post_file(text)

    assert result.is_ok
    parsed = result.value
    assert parsed.frontmatter.title == "Hello"
    assert parsed.frontmatter.date == "2024-01-05"
    assert parsed.frontmatter.tags == ["Python"]
    assert parsed.frontmatter.draft is False
    assert parsed.body.startswith("# Heading")


def test_missing_opening_delimiter_is_parse_error():
    result = parse_post_file("title: Hello\n---\nbody", path="a.md")

    assert isinstance(result.error, ParseError)
    assert result.error.message == "Invalid frontmatter format"
    assert result.error.path == "a.md"


def test_unclosed_block_is_parse_error():
    assert isinstance(split_frontmatter("---\ntitle: x\nbody").error, ParseError)


def test_invalid_yaml_is_parse_error_with_cause():
    result = parse_post_file("---\ntitle: [unclosed\ndate: 2024-01-05\n---\nbody")

    assert isinstance(result.error, ParseError)
    assert result.error.cause is not None


def test_missing_title_and_date_are_all_reported():
    result = parse_post_file("---\nexcerpt: hi\n---\nbody")

    assert isinstance(result.error, ValidationError)
    fields = {violation.split(":")[0] for violation in result.error.errors}
    assert {"title", "date"} <= fields


def test_date_accepts_date_objects_and_rejects_other_formats():
    assert validate_frontmatter({"title": "t", "date": datetime.date(2024, 2, 29)}).value.date == "2024-02-29"
    assert validate_frontmatter({"title": "t", "date": datetime.datetime(2024, 3, 1, 9, 30)}).value.date == "2024-03-01"
    assert validate_frontmatter({"title": "t", "date": "2024-02-29"}).is_ok
    assert not validate_frontmatter({"title": "t", "date": "05/01/2024"}).is_ok
    assert not validate_frontmatter({"title": "t", "date": "2023-02-30"}).is_ok


def test_title_limits():
    assert not validate_frontmatter({"title": "", "date": "2024-01-01"}).is_ok
    assert not validate_frontmatter({"title": "   ", "date": "2024-01-01"}).is_ok
    assert not validate_frontmatter({"title": "x" * 201, "date": "2024-01-01"}).is_ok
    assert validate_frontmatter({"title": "x" * 200, "date": "2024-01-01"}).is_ok


def test_tag_rules():
    base = {"title": "t", "date": "2024-01-01"}

    assert validate_frontmatter({**base, "tags": ["a", "b"]}).is_ok
    assert not validate_frontmatter({**base, "tags": ["a", "a"]}).is_ok
    assert not validate_frontmatter({**base, "tags": [" a"]}).is_ok
    assert not validate_frontmatter({**base, "tags": [""]}).is_ok
    assert not validate_frontmatter({**base, "tags": ["x" * 51]}).is_ok
    assert not validate_frontmatter({**base, "tags": [f"t{i}" for i in range(11)]}).is_ok
    assert not validate_frontmatter({**base, "tags": "python"}).is_ok


def test_optional_fields():
    base = {"title": "t", "date": "2024-01-01"}

    assert not validate_frontmatter({**base, "excerpt": "x" * 501}).is_ok
    assert validate_frontmatter({**base, "modified": "2024-02-01"}).value.modified == "2024-02-01"
    assert not validate_frontmatter({**base, "modified": "yesterday"}).is_ok
    assert validate_frontmatter({**base, "slug": "custom-slug-2"}).value.slug == "custom-slug-2"
    assert not validate_frontmatter({**base, "slug": "Not Valid"}).is_ok
    assert validate_frontmatter({**base, "draft": True}).value.draft is True


def test_unknown_keys_are_ignored():
    result = validate_frontmatter({"title": "t", "date": "2024-01-01", "layout": "post"})
    assert result.is_ok
