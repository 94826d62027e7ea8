"""
Core data models for postboard.

Accounts own posts; a post may carry one attachment. All models are
immutable: state changes go through the `with_*` helpers, which return a
new value, and only become durable through an explicit store call.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, field_validator

from postboard.core.errors import ValidationFailed
from postboard.core.utils import is_blank


TITLE_MAX_LENGTH = 100

T = TypeVar("T")


# =============================================================================
# Enums
# =============================================================================


class SearchKind(str, Enum):
    """Which field a keyword search looks at."""

    ALL = "all"
    TITLE = "title"
    CONTENT = "content"
    OWNER = "owner"


# =============================================================================
# Accounts
# =============================================================================


class Account(BaseModel):
    """A registered user, keyed by an immutable identifier."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    password_hash: str = Field(repr=False)
    email: str | None = None
    nickname: str | None = None
    memo: str | None = None

    # Audit
    created_at: datetime
    created_by: str
    modified_at: datetime
    modified_by: str

    def with_profile(
        self,
        password_hash: str,
        email: str | None,
        nickname: str | None,
        memo: str | None,
        *,
        modified_by: str,
        modified_at: datetime,
    ) -> Account:
        """Return a copy carrying new profile fields and a fresh modify stamp."""
        return self.model_copy(update={
            "password_hash": password_hash,
            "email": email,
            "nickname": nickname,
            "memo": memo,
            "modified_by": modified_by,
            "modified_at": modified_at,
        })


class ProfileUpdate(BaseModel):
    """New values for an account's mutable fields."""

    password: str = ""
    email: str | None = None
    nickname: str | None = None
    memo: str | None = None


# =============================================================================
# Attachments
# =============================================================================


class AttachmentDescriptor(BaseModel):
    """Where a post's file lives. All three fields or no descriptor at all."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    content_type: str


class FilePayload(BaseModel):
    """A raw uploaded file as handed over by the transport."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    original_name: str
    content_type: str = "application/octet-stream"

    @property
    def is_empty(self) -> bool:
        return len(self.data) == 0


# =============================================================================
# Posts
# =============================================================================


class PostInput(BaseModel):
    """Validated title/content pair for create and update."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(min_length=1)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if is_blank(value):
            raise ValueError("must not be blank")
        return value

    @classmethod
    def of(cls, title: str, content: str) -> PostInput:
        """Build an input, raising ValidationFailed instead of pydantic errors."""
        try:
            return cls(title=title, content=content)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationFailed(problems) from e


class Post(BaseModel):
    """
    A short text post with an optional attachment.

    `id` is None until the post store assigns one; afterwards it never
    changes. Every post has exactly one owner.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    owner_id: str
    title: str
    content: str
    attachment: AttachmentDescriptor | None = None

    # Audit
    created_at: datetime
    created_by: str
    modified_at: datetime
    modified_by: str

    @classmethod
    def new(cls, owner_id: str, data: PostInput, *, by: str, at: datetime) -> Post:
        """A not-yet-persisted post stamped as created by `by` at `at`."""
        return cls(
            owner_id=owner_id,
            title=data.title,
            content=data.content,
            created_at=at,
            created_by=by,
            modified_at=at,
            modified_by=by,
        )

    @property
    def has_attachment(self) -> bool:
        return self.attachment is not None

    def with_id(self, post_id: int) -> Post:
        return self.model_copy(update={"id": post_id})

    def with_content(self, data: PostInput) -> Post:
        return self.model_copy(update={"title": data.title, "content": data.content})

    def with_attachment(self, attachment: AttachmentDescriptor | None) -> Post:
        return self.model_copy(update={"attachment": attachment})

    def stamped_update(self, *, by: str, at: datetime) -> Post:
        return self.model_copy(update={"modified_by": by, "modified_at": at})


# =============================================================================
# Pagination
# =============================================================================


class PageRequest(BaseModel):
    """
    Offset/limit pagination.

    `page` is zero-based. `sort` names a post field, prefixed with "-" for
    descending order; None keeps insertion order.
    """

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=0, ge=0)
    size: int = Field(default=20, ge=1)
    sort: str | None = None

    @property
    def offset(self) -> int:
        return self.page * self.size


class Page(BaseModel, Generic[T]):
    """One slice of a result set plus the total match count."""

    items: list[T]
    total: int
    page: int
    size: int

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total + self.size - 1) // self.size
