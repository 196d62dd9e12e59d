from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str = "contenthub"
    rules_version: str = "1"

class RbacRules(BaseModel):
    roles: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "admin": ["*"],
            "moderator": ["content:*", "review:*", "distribution:*", "upload:image"],
            "editor": ["content:create", "content:read", "content:list", "content:edit_any",
                       "upload:image"],
            "contributor": ["content:create", "content:read_own", "content:edit_own",
                            "upload:image"],
        }
    )
    public_permissions: list[str] = Field(default_factory=lambda: ["hubs:read"])

class ContentRules(BaseModel):
    # Roles that may edit any content at any status without resetting review
    privileged_editor_roles: list[str] = Field(
        default_factory=lambda: ["admin", "moderator", "editor"]
    )
    # Statuses in which the owning contributor may still edit
    owner_editable_statuses: list[str] = Field(default_factory=lambda: ["pending"])
    title_max_length: int = 400

class ReviewRules(BaseModel):
    reviewer_roles: list[str] = Field(default_factory=lambda: ["admin", "moderator"])
    status_machine: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "pending": ["verified", "rejected"],
            "verified": [],
            "rejected": [],
        }
    )
    max_bulk_items: int = 100

class UploadsRules(BaseModel):
    max_upload_bytes: int = 5 * 1024 * 1024
    allowed_mime_prefix: str = "image/"
    allowlist_mime_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/png", "image/webp", "image/gif"]
    )

class DraftRules(BaseModel):
    default_language: str = "English"
    default_original_language: str = "English"

class DistributionRules(BaseModel):
    manager_roles: list[str] = Field(default_factory=lambda: ["admin", "moderator"])
    require_verified: bool = True

class PaginationRules(BaseModel):
    default_limit: int = 10
    max_limit: int = 100

class Rules(BaseModel):
    project: ProjectRules = Field(default_factory=ProjectRules)
    rbac: RbacRules = Field(default_factory=RbacRules)
    content: ContentRules = Field(default_factory=ContentRules)
    review: ReviewRules = Field(default_factory=ReviewRules)
    uploads: UploadsRules = Field(default_factory=UploadsRules)
    draft: DraftRules = Field(default_factory=DraftRules)
    distribution: DistributionRules = Field(default_factory=DistributionRules)
    pagination: PaginationRules = Field(default_factory=PaginationRules)
