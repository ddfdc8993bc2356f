import datetime
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

import frontmatter
import pydantic
import yaml
from frontmatter.default_handlers import YAMLHandler
from pydantic import BaseModel, ConfigDict, Field, field_validator

from blogo.errors import ParseError, ValidationError
from blogo.result import Result, err, ok
from blogo.utils import convert_date

logger = logging.getLogger(__name__)

FRONTMATTER_BLOCK = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n(.*))?\Z", re.DOTALL)
DATE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")

TITLE_MAX_LENGTH = 200
EXCERPT_MAX_LENGTH = 500
TAG_MAX_LENGTH = 50
MAX_TAGS = 10


class Frontmatter(BaseModel):
    """Validated post metadata. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    date: str
    excerpt: Optional[str] = Field(default=None, max_length=EXCERPT_MAX_LENGTH)
    tags: Optional[List[str]] = Field(default=None, max_length=MAX_TAGS)
    modified: Optional[str] = None
    slug: Optional[str] = Field(default=None, pattern=r"^[a-z0-9-]+$")
    draft: bool = False

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("date", "modified", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        if value is None:
            return value
        value = convert_date(value)
        if isinstance(value, str) and DATE_FORMAT.match(value):
            try:
                datetime.date.fromisoformat(value)
            except ValueError:
                raise ValueError(f"{value!r} is not a valid calendar date")
            return value
        raise ValueError("must be a date in YYYY-MM-DD format")

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, tags: Optional[List[str]]) -> Optional[List[str]]:
        if tags is None:
            return tags
        problems = []
        for tag in tags:
            if not tag.strip():
                problems.append("tags must not be blank")
            elif tag.strip() != tag:
                problems.append(f"tag {tag!r} has leading or trailing whitespace")
            elif len(tag) > TAG_MAX_LENGTH:
                problems.append(f"tag {tag!r} is longer than {TAG_MAX_LENGTH} characters")
        if len(set(tags)) != len(tags):
            problems.append("duplicate tags are not allowed")
        if problems:
            raise ValueError("; ".join(problems))
        return tags


@dataclass(frozen=True)
class ParsedPost:
    frontmatter: Frontmatter
    body: str


def split_frontmatter(text: str) -> Result[tuple]:
    """Return (raw frontmatter, markdown body) when the file opens with a --- block."""
    match = FRONTMATTER_BLOCK.match(text)
    if not match:
        return err(ParseError("Invalid frontmatter format"))
    return ok((match.group(1), match.group(2) or ""))


def validate_frontmatter(metadata: dict) -> Result[Frontmatter]:
    try:
        return ok(Frontmatter.model_validate(metadata))
    except pydantic.ValidationError as e:
        violations = [
            f"{'.'.join(str(part) for part in error['loc']) or 'frontmatter'}: {error['msg']}"
            for error in e.errors()
        ]
        return err(
            ValidationError(
                f"Frontmatter validation failed: {', '.join(violations)}",
                errors=violations,
            )
        )


def parse_post_file(text: str, path: Optional[str] = None) -> Result[ParsedPost]:
    """
    Split, parse and validate a markdown file with a YAML frontmatter block.
    Never raises; every failure comes back as a ParseError or ValidationError.
    """
    split = split_frontmatter(text)
    if not split.is_ok:
        split.error.path = path
        return split

    try:
        parsed = frontmatter.loads(text, handler=YAMLHandler())
    except yaml.YAMLError as e:
        return err(ParseError("Failed to parse frontmatter YAML", e, path=path))
    except ValueError as e:
        return err(ParseError("Invalid frontmatter format", e, path=path))

    validated = validate_frontmatter(parsed.metadata or {})
    if not validated.is_ok:
        validated.error.path = path
        return validated

    return ok(ParsedPost(frontmatter=validated.value, body=split.value[1]))
