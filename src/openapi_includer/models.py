"""Normalized models for one OpenAPI document.

The loader and normalizer turn a raw document into these models; the
filter, TOC and content builders only ever see them.
"""

from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Info(BaseModel):
    """Document-level metadata from the root ``info`` object."""

    title: str
    version: str
    description: str | None = None
    terms_of_service: str | None = None
    contact: dict | None = None
    license: dict | None = None


class Endpoint(BaseModel):
    """A single HTTP operation (method + path)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str  # stable, used as the page file name
    method: str  # GET / POST / ...
    path: str
    operation_id: str | None = Field(default=None, alias="operationId")
    summary: str | None = None
    description: str | None = None
    tags: list[str] = []
    parameters: list[dict] = []
    request_body: dict | None = Field(default=None, alias="requestBody")
    responses: dict = {}
    security: list[dict] = []
    servers: list[dict] = []
    deprecated: bool = False
    noindex: bool = False


class Tag(BaseModel):
    """A named group of endpoints; owns its ``endpoints`` list."""

    id: str  # directory name for the section
    name: str
    description: str | None = None
    endpoints: list[Endpoint] = []


class TagMap:
    """Ordered tag-id -> Tag association.

    Keeps insertion order in an explicit list of pairs and a separate index
    for lookups. Setting an existing id replaces the tag in its original slot.
    """

    def __init__(self, pairs: Iterable[tuple[str, Tag]] = ()):
        self._pairs: list[tuple[str, Tag]] = []
        self._index: dict[str, int] = {}
        for tag_id, tag in pairs:
            self.set(tag_id, tag)

    def set(self, tag_id: str, tag: Tag) -> None:
        if tag_id in self._index:
            self._pairs[self._index[tag_id]] = (tag_id, tag)
        else:
            self._index[tag_id] = len(self._pairs)
            self._pairs.append((tag_id, tag))

    def get(self, tag_id: str, default: Tag | None = None) -> Tag | None:
        pos = self._index.get(tag_id)
        if pos is None:
            return default
        return self._pairs[pos][1]

    def keys(self) -> list[str]:
        return [tag_id for tag_id, _ in self._pairs]

    def values(self) -> list[Tag]:
        return [tag for _, tag in self._pairs]

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self._index

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[tuple[str, Tag]]:
        return iter(list(self._pairs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagMap):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"TagMap({self._pairs!r})"


class Specification(BaseModel):
    """Tags (each owning its endpoints) plus the untagged endpoints."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tags: TagMap = Field(default_factory=TagMap)
    endpoints: list[Endpoint] = []

    def all_endpoints(self) -> Iterator[Endpoint]:
        for _, tag in self.tags:
            yield from tag.endpoints
        yield from self.endpoints


Refs = dict[str, Any]  # schema name -> schema (or raw top-level entry)


class TocItem(BaseModel):
    """A navigation node: a leaf with ``href`` or a branch with ``items``."""

    name: str
    href: str | None = None
    items: list["TocItem"] | None = None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)
