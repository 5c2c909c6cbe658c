"""
Announcement Model
Database schema for company announcements, their tags, recipients and comments
"""
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from beanie import Document, PydanticObjectId

from intranet.models.department import DepartmentSummary
from intranet.models.employee import AuthorSummary


class AnnouncementStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"


class RecipientType(str, Enum):
    EMPLOYEE = "employee"
    DEPARTMENT = "department"


class Announcement(Document):
    """Announcement document model"""
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    announcement_cover_url: Optional[str] = None
    page_cover_url: Optional[str] = None
    status: AnnouncementStatus = AnnouncementStatus.DRAFT
    enable_comments: bool = False
    publish_date: Optional[datetime] = None

    # Denormalized counters
    views_count: int = 0
    likes_count: int = 0
    comments_count: int = 0
    shares_count: int = 0

    created_by: PydanticObjectId
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "announcements"
        indexes = ["status", "created_by", "created_at"]


class AnnouncementTag(Document):
    """Tag attached to an announcement"""
    announcement_id: PydanticObjectId
    tag_name: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "announcement_tags"
        indexes = ["announcement_id", "tag_name"]


class AnnouncementRecipient(Document):
    """Employee or department targeted by an announcement"""
    announcement_id: PydanticObjectId
    recipient_type: RecipientType
    recipient_id: PydanticObjectId
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "announcement_recipients"
        indexes = ["announcement_id"]


class AnnouncementComment(Document):
    """Comment or reply on an announcement"""
    announcement_id: PydanticObjectId
    user_id: PydanticObjectId
    comment_text: str
    parent_comment_id: Optional[PydanticObjectId] = None
    is_edited: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "announcement_comments"
        indexes = ["announcement_id", "parent_comment_id", "user_id"]


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

SortField = Literal[
    "created_at",
    "updated_at",
    "title",
    "publish_date",
    "views_count",
    "likes_count",
    "comments_count",
]
SortOrder = Literal["asc", "desc"]


class RecipientIn(BaseModel):
    type: RecipientType
    id: PydanticObjectId


class AnnouncementCreate(BaseModel):
    """Schema for creating an announcement"""
    title: str = Field(..., min_length=5, max_length=255)
    description: str = Field(..., min_length=10, max_length=255)
    content: str = Field(..., min_length=1)
    announcement_cover_url: Optional[HttpUrl] = None
    page_cover_url: Optional[HttpUrl] = None
    status: AnnouncementStatus = AnnouncementStatus.DRAFT
    enable_comments: bool = False
    publish_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    recipients: Optional[List[RecipientIn]] = None


class AnnouncementUpdate(BaseModel):
    """Schema for updating an announcement; omitted fields are left untouched"""
    title: Optional[str] = Field(None, min_length=5, max_length=255)
    description: Optional[str] = Field(None, min_length=10, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    announcement_cover_url: Optional[HttpUrl] = None
    page_cover_url: Optional[HttpUrl] = None
    status: Optional[AnnouncementStatus] = None
    enable_comments: Optional[bool] = None
    publish_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    recipients: Optional[List[RecipientIn]] = None


class AnnouncementFilter(BaseModel):
    """Query parameters accepted by the announcement listing"""
    status: Optional[Literal["all", "draft", "published", "unpublished"]] = None
    search: Optional[str] = None
    sort_by: SortField = "created_at"
    sort_order: SortOrder = "desc"
    page: int = 1
    limit: int = 10


class CommentCreate(BaseModel):
    comment_text: str = Field(..., min_length=1, max_length=2000)
    parent_comment_id: Optional[PydanticObjectId] = None


class CommentUpdate(BaseModel):
    comment_text: str = Field(..., min_length=1, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    tag_name: str


class RecipientEmployee(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    full_name: str
    employee_number: str


class RecipientResponse(BaseModel):
    id: PydanticObjectId
    recipient_type: RecipientType
    recipient_id: PydanticObjectId
    employee: Optional[RecipientEmployee] = None
    department: Optional[DepartmentSummary] = None


class AnnouncementSummary(BaseModel):
    """Announcement row as shown in listings"""
    id: PydanticObjectId
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    announcement_cover_url: Optional[str] = None
    page_cover_url: Optional[str] = None
    status: AnnouncementStatus
    enable_comments: bool
    publish_date: Optional[datetime] = None
    views_count: int
    likes_count: int
    comments_count: int
    shares_count: int
    created_by: PydanticObjectId
    created_at: datetime
    updated_at: datetime
    author: Optional[AuthorSummary] = None


class AnnouncementDetail(AnnouncementSummary):
    """Announcement with its tags and recipients"""
    tags: List[TagResponse] = []
    recipients: List[RecipientResponse] = []


class CommentResponse(BaseModel):
    id: PydanticObjectId
    announcement_id: PydanticObjectId
    user_id: PydanticObjectId
    comment_text: str
    parent_comment_id: Optional[PydanticObjectId] = None
    is_edited: bool
    created_at: datetime
    updated_at: datetime
    author: Optional[AuthorSummary] = None


class CommentThread(CommentResponse):
    """Top-level comment with a preview of its first replies"""
    replies: List[CommentResponse] = []
    reply_count: int = 0


class AnnouncementStats(BaseModel):
    total_announcement: int
    total_published: int
    total_draft: int
    total_unpublished: int


class TagCount(BaseModel):
    name: str
    count: int
