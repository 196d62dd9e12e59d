from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .questions import Question

# --- Enums / Literals ---
RoleType = Literal["admin", "moderator", "editor", "contributor"]
ContentStatus = Literal["pending", "verified", "rejected"]
HubStatus = Literal["active", "inactive"]
AssignedFilter = Literal["all", "assigned", "unassigned"]


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- User (auth collaborator boundary) ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    display_name: str
    roles: list[RoleType] = Field(default_factory=list)
    status: Literal["active", "disabled"] = "active"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

# --- Content ---

class Content(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str = ""
    body_markup: str = ""
    cover_image_url: str | None = None

    language: str
    original_language: str = ""
    category_ids: list[str] = Field(default_factory=list)
    author_ids: list[str] = Field(default_factory=list)
    age_group_id: str
    target_countries: list[str] = Field(default_factory=list)

    questions: list[Question] = Field(default_factory=list)

    status: ContentStatus = "pending"
    rejection_reason: str | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None

    contributor_id: UUID
    version: int = 1

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

# --- Distribution ---

class EdgeHub(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    hub_id: str  # Stable external identifier, distinct from the primary key
    name: str
    location: str = ""
    status: HubStatus = "active"
    created_at: datetime = Field(default_factory=utcnow)

class ContentHubAssignment(BaseModel):
    content_id: UUID
    hub_pk: UUID
    assigned_by: UUID | None = None
    assigned_at: datetime = Field(default_factory=utcnow)

class HubContentItem(BaseModel):
    """Content row joined with its assignment flag for one hub."""

    content_id: UUID
    title: str
    description: str = ""
    language: str = ""
    status: ContentStatus
    cover_image_url: str | None = None
    created_at: datetime
    is_assigned: bool
