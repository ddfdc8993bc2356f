import logging
from typing import Callable, Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from blogo.models.post_view import PostView

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


class PostViewService:
    """View-count store keyed by slug. Opens one session per operation."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_views_for_slugs(self, slugs: Iterable[str]) -> Dict[str, int]:
        normalized: List[str] = list({slug for slug in slugs if slug})
        if not normalized:
            return {}

        with self.session_factory() as db:
            rows = (
                db.query(PostView.slug, PostView.view_count)
                .filter(PostView.slug.in_(normalized))
                .all()
            )
        return {slug: count for slug, count in rows}

    def get_all_view_counts(self) -> Dict[str, int]:
        with self.session_factory() as db:
            rows = db.query(PostView.slug, PostView.view_count).all()
        return {slug: count for slug, count in rows}

    def get_view_count(self, slug: str) -> int:
        with self.session_factory() as db:
            record = db.get(PostView, slug)
            return record.view_count if record else 0

    def increment_view(self, slug: str) -> int:
        with self.session_factory() as db:
            dialect = db.get_bind().dialect.name
            insert = _UPSERT_DIALECTS.get(dialect)
            if insert is None:
                raise ValueError(f"Unsupported view-count database dialect: {dialect}")

            stmt = (
                insert(PostView)
                .values(slug=slug, view_count=1)
                .on_conflict_do_update(
                    index_elements=[PostView.slug],
                    set_={
                        "view_count": PostView.view_count + 1,
                        "last_viewed_at": func.now(),
                    },
                )
                .returning(PostView.view_count)
            )

            result = db.execute(stmt)
            count = result.scalar_one()
            db.commit()
        logger.debug(f"View count for {slug} is now {count}")
        return count
