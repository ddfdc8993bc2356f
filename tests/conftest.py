import textwrap
from types import SimpleNamespace

import pytest

from blogo.schemas.atproto import ListRecordsResponse, PutRecordResponse, RecordEntry
from blogo.settings import Settings


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeResult:
    def __init__(self, value):
        self.value = value

    def scalar_one(self):
        return self.value


class FakeQuery:
    def __init__(self, rows):
        self.rows = rows
        self.filtered = None

    def filter(self, expr):
        self.filtered = expr
        return self

    def all(self):
        return self.rows


class FakeSession:
    """
    Lightweight SQLAlchemy Session stand-in for PostViewService tests.
    Works as its own session factory: calling it returns itself.
    """

    def __init__(self, rows=None, record_map=None, execute_value=1, dialect="sqlite"):
        self.rows = rows or []
        self.record_map = record_map or {}
        self.execute_value = execute_value
        self.dialect = dialect
        self.executed_stmt = None
        self.committed = False
        self.closed = False
        self.last_query = None

    def __call__(self):
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def get_bind(self):
        return SimpleNamespace(dialect=SimpleNamespace(name=self.dialect))

    def query(self, *cols):
        self.last_query = FakeQuery(self.rows)
        return self.last_query

    def get(self, model, key):
        return self.record_map.get(key)

    def execute(self, stmt):
        self.executed_stmt = stmt
        return FakeResult(self.execute_value)

    def commit(self):
        self.committed = True


class FakeViewService:
    """
    Minimal view-count store for content service and router tests.
    """

    def __init__(self, counts=None):
        self.counts = dict(counts or {})
        self.calls = []

    def get_views_for_slugs(self, slugs):
        slugs_list = list(slugs)
        self.calls.append(tuple(slugs_list))
        return {slug: self.counts.get(slug, 0) for slug in slugs_list}

    def get_all_view_counts(self):
        self.calls.append("all")
        return dict(self.counts)

    def get_view_count(self, slug: str) -> int:
        self.calls.append(slug)
        return self.counts.get(slug, 0)

    def increment_view(self, slug: str) -> int:
        self.calls.append(f"+{slug}")
        self.counts[slug] = self.counts.get(slug, 0) + 1
        return self.counts[slug]


class FakeAtProtoClient:
    """
    In-memory PDS stand-in. `pages` is a list of ListRecordsResponse pages
    returned in order by list_records.
    """

    def __init__(self, pages=None, fail_on=None):
        self.pages = list(pages or [])
        self.fail_on = fail_on or {}
        self.put_calls = []
        self.list_calls = []

    async def put_record(self, collection, rkey, record):
        if rkey in self.fail_on:
            raise self.fail_on[rkey]
        self.put_calls.append((collection, rkey, record))
        return PutRecordResponse(uri=f"at://did:plc:test/{collection}/{rkey}", cid="bafy")

    async def list_records(self, collection, model, limit=100, cursor=None):
        self.list_calls.append((collection, limit, cursor))
        if "list" in self.fail_on:
            raise self.fail_on["list"]
        if not self.pages:
            return ListRecordsResponse[model]()
        return self.pages.pop(0)


def record_page(documents, cursor=None):
    return ListRecordsResponse(
        records=[RecordEntry(uri=f"at://did:plc:test/doc/{i}", cid="bafy", value=doc) for i, doc in enumerate(documents)],
        cursor=cursor,
    )


def post_text(title="Hello", date="2024-01-05", body="Hello body.", **extra) -> str:
    """Build a markdown file with a frontmatter block."""
    lines = ["---", f"title: {title}", f"date: {date}"]
    for key, value in extra.items():
        if isinstance(value, list):
            lines.append(f"{key}:")
            lines.extend(f"  - {item}" for item in value)
        else:
            lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n" + textwrap.dedent(body).lstrip()


@pytest.fixture
def posts_dir(tmp_path):
    directory = tmp_path / "posts"
    directory.mkdir()
    return directory


@pytest.fixture
def write_post(posts_dir):
    def _write(filename, **kwargs):
        path = posts_dir / filename
        path.write_text(post_text(**kwargs), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def test_settings(tmp_path, posts_dir):
    public = tmp_path / "public"
    public.mkdir()
    return Settings(
        ENVIRONMENT="test",
        POSTS_DIR=str(posts_dir),
        PUBLIC_DIR=str(public),
        PUBLIC_URL="https://blog.example.com",
        BLOG_TITLE="Test Blog",
        BLOG_DESCRIPTION="Posts for tests",
        WARM_CACHE_ON_STARTUP=False,
        VIEWS_DATABASE_URL="sqlite://",
    )


@pytest.fixture
def container(test_settings):
    from blogo.container import create_container

    return create_container(test_settings, view_service=FakeViewService())
