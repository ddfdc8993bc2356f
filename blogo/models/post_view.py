from sqlalchemy import Column, DateTime, Integer, String, func

from blogo.db.base import Base


class PostView(Base):
    """Per-slug view counter; the only state kept outside the posts directory."""

    __tablename__ = "post_views"

    slug = Column(String(256), primary_key=True)
    view_count = Column(Integer, nullable=False, default=0, server_default="0")
    first_viewed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_viewed_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
