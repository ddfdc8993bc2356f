from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: str
    title: str
    date: str
    excerpt: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    modified: Optional[str] = None
    formattedDate: Optional[str] = None
    readingTime: Optional[str] = None
    viewCount: Optional[int] = None


class Post(PostMeta):
    content: str


class TagInfo(BaseModel):
    name: str
    count: int
    posts: List[Post] = Field(default_factory=list)


class TagSummary(BaseModel):
    name: str
    count: int


class TopicGroup(BaseModel):
    topic: str
    slug: str
    tags: List[TagInfo] = Field(default_factory=list)
