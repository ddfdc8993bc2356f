from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DOCUMENT_COLLECTION = "site.standard.document"
PUBLICATION_COLLECTION = "site.standard.publication"
MARKDOWN_CONTENT = "site.standard.content.markdown"
HTML_CONTENT = "site.standard.content.html"


class LexiconModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class DocumentContent(LexiconModel):
    type: str = Field(alias="$type")
    value: Optional[str] = None


class StandardDocument(LexiconModel):
    type: str = Field(default=DOCUMENT_COLLECTION, alias="$type")
    site: str
    title: str
    publishedAt: str
    path: str
    description: Optional[str] = None
    content: Optional[DocumentContent] = None
    textContent: Optional[str] = None
    tags: Optional[List[str]] = None
    updatedAt: Optional[str] = None


class Publication(LexiconModel):
    type: str = Field(default=PUBLICATION_COLLECTION, alias="$type")
    url: str
    name: str
    description: Optional[str] = None


class PutRecordResponse(BaseModel):
    uri: str
    cid: str


class RecordEntry(BaseModel, Generic[T]):
    uri: str
    cid: Optional[str] = None
    value: T


class ListRecordsResponse(BaseModel, Generic[T]):
    records: List[RecordEntry[T]] = Field(default_factory=list)
    cursor: Optional[str] = None


class PublishReport(BaseModel):
    published: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)


class PullReport(BaseModel):
    pulled: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)
