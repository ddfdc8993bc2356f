import datetime
import html
import math
import re
from typing import List, Sequence, Tuple, TypeVar

T = TypeVar("T")

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TAG = re.compile(r"<[^>]+>")


def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to one hyphen, strip edges."""
    return _NON_ALNUM.sub("-", value.lower()).strip("-")


def calculate_reading_time(text: str) -> str:
    words = text.split()
    minutes = math.ceil(len(words) / 200) or 1
    return f"{minutes} min"


def convert_date(value):
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    return value


def format_date(iso_date: str) -> str:
    d = datetime.date.fromisoformat(iso_date)
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def strip_html(markup: str) -> str:
    return html.unescape(_TAG.sub(" ", markup))


def paginate(items: Sequence[T], page: int, per_page: int) -> Tuple[List[T], int]:
    """Return the items on `page` (1-based, clamped) and the page count."""
    total_pages = max(1, math.ceil(len(items) / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return list(items[start : start + per_page]), total_pages
