from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from contenthub.components.content import ContentFields
from contenthub.domain.encoding import encode_questions, encode_string_list
from contenthub.domain.entities import (
    AssignedFilter,
    Content,
    ContentStatus,
    EdgeHub,
    HubContentItem,
    HubStatus,
)


class CamelModel(BaseModel):
    """Wire models use camelCase keys; snake_case is accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Content ---
class ContentWriteRequest(CamelModel):
    # Required fields default to empty so the component reports them by code
    title: str = ""
    description: str = ""
    body_markup: str = ""
    cover_image_url: str | None = None
    language: str = ""
    original_language: str = ""
    category_ids: list[str] = []
    author_ids: list[str] = []
    age_group_id: str = ""
    # JSON string or list
    target_countries: Any = None
    questions: Any = None
    expected_version: int | None = None

    def to_fields(self) -> ContentFields:
        return ContentFields(
            title=self.title,
            description=self.description,
            body_markup=self.body_markup,
            cover_image_url=self.cover_image_url,
            language=self.language,
            original_language=self.original_language,
            category_ids=list(self.category_ids),
            author_ids=list(self.author_ids),
            age_group_id=self.age_group_id,
            target_countries=self.target_countries,
            questions=self.questions,
        )


class SubmitResponse(CamelModel):
    id: UUID


class UpdateResponse(CamelModel):
    id: UUID
    version: int


class ContentResponse(CamelModel):
    """Stored content; questions and targetCountries are JSON strings."""

    id: UUID
    title: str
    description: str
    body_markup: str
    cover_image_url: str | None = None
    language: str
    original_language: str
    category_ids: list[str]
    author_ids: list[str]
    age_group_id: str
    target_countries: str
    questions: str
    status: ContentStatus
    rejection_reason: str | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    contributor_id: UUID
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, content: Content) -> "ContentResponse":
        return cls(
            id=content.id,
            title=content.title,
            description=content.description,
            body_markup=content.body_markup,
            cover_image_url=content.cover_image_url,
            language=content.language,
            original_language=content.original_language,
            category_ids=content.category_ids,
            author_ids=content.author_ids,
            age_group_id=content.age_group_id,
            target_countries=encode_string_list(content.target_countries),
            questions=encode_questions(content.questions),
            status=content.status,
            rejection_reason=content.rejection_reason,
            reviewed_by=content.reviewed_by,
            reviewed_at=content.reviewed_at,
            contributor_id=content.contributor_id,
            version=content.version,
            created_at=content.created_at,
            updated_at=content.updated_at,
        )


class ContentListResponse(CamelModel):
    items: list[ContentResponse]
    total: int
    page: int
    limit: int
    total_pages: int


# --- Review ---
class StatusChangeRequest(CamelModel):
    status: Literal["verified", "rejected"]
    reason: str | None = None


class BulkReviewRequest(CamelModel):
    ids: list[UUID]
    status: Literal["verified", "rejected"]
    reason: str | None = None


class BulkFailureModel(CamelModel):
    id: UUID
    code: str
    message: str


class BulkReviewResponse(CamelModel):
    succeeded: list[UUID]
    failed: list[BulkFailureModel]


# --- Uploads ---
class UploadResponse(CamelModel):
    url: str


# --- Edge hubs ---
class HubResponse(CamelModel):
    hub_id: str
    name: str
    location: str
    status: HubStatus
    created_at: datetime

    @classmethod
    def from_entity(cls, hub: EdgeHub) -> "HubResponse":
        return cls(
            hub_id=hub.hub_id,
            name=hub.name,
            location=hub.location,
            status=hub.status,
            created_at=hub.created_at,
        )


class HubDetailResponse(HubResponse):
    assigned_count: int = 0


class HubListResponse(CamelModel):
    items: list[HubResponse]


class HubContentItemResponse(CamelModel):
    id: UUID
    title: str
    description: str
    language: str
    status: ContentStatus
    cover_image_url: str | None = None
    created_at: datetime
    is_assigned: bool

    @classmethod
    def from_entity(cls, item: HubContentItem) -> "HubContentItemResponse":
        return cls(
            id=item.content_id,
            title=item.title,
            description=item.description,
            language=item.language,
            status=item.status,
            cover_image_url=item.cover_image_url,
            created_at=item.created_at,
            is_assigned=item.is_assigned,
        )


class HubContentListResponse(CamelModel):
    hub: HubResponse
    assigned: AssignedFilter
    items: list[HubContentItemResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class AssignmentResponse(CamelModel):
    hub_id: str
    content_id: UUID
    assigned: bool
    changed: bool
