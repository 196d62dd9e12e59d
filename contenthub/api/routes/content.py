from uuid import UUID

from fastapi import APIRouter, Depends

from contenthub.adapters.clock import SystemClock
from contenthub.adapters.sqlite.repos import SQLiteContentRepo
from contenthub.api.deps import get_clock, get_content_repo, get_current_user, get_policy, get_rules
from contenthub.api.schemas import (
    BulkFailureModel,
    BulkReviewRequest,
    BulkReviewResponse,
    ContentListResponse,
    ContentResponse,
    ContentWriteRequest,
    StatusChangeRequest,
    SubmitResponse,
    UpdateResponse,
)
from contenthub.components.content import (
    ContentListOutput,
    CreateContentInput,
    GetContentInput,
    ListContentInput,
    UpdateContentInput,
    run_create,
    run_get,
    run_list,
    run_update,
)
from contenthub.components.review import (
    ApproveInput,
    BulkReviewInput,
    RejectInput,
    run_approve,
    run_bulk_review,
    run_reject,
)
from contenthub.domain.entities import ContentStatus, User
from contenthub.domain.policy import PolicyEngine
from contenthub.rules.models import Rules

router = APIRouter()


def _list_response(result: ContentListOutput) -> ContentListResponse:
    return ContentListResponse(
        items=[ContentResponse.from_entity(c) for c in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


def _list(
    *,
    actor: User,
    repo: SQLiteContentRepo,
    policy: PolicyEngine,
    rules: Rules,
    status: ContentStatus | None,
    search: str | None,
    page: int,
    limit: int | None,
    mine_only: bool = False,
) -> ContentListResponse:
    inp = ListContentInput(
        actor=actor,
        status=status,
        search=search,
        page=page,
        limit=limit or rules.pagination.default_limit,
        mine_only=mine_only,
    )
    result = run_list(inp, repo=repo, policy=policy, max_limit=rules.pagination.max_limit)
    return _list_response(result)


@router.post("/submit", response_model=SubmitResponse)
def submit_content(
    req: ContentWriteRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> SubmitResponse:
    """Create content in pending state."""
    result = run_create(
        CreateContentInput(actor=current_user, fields=req.to_fields()),
        repo=repo,
        time=clock,
        policy=policy,
    )
    return SubmitResponse(id=result.content.id)


@router.get("", response_model=ContentListResponse)
def list_content(
    status: ContentStatus | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
    current_user: User = Depends(get_current_user),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> ContentListResponse:
    return _list(
        actor=current_user,
        repo=repo,
        policy=policy,
        rules=rules,
        status=status,
        search=search,
        page=page,
        limit=limit,
    )


@router.get("/pending", response_model=ContentListResponse)
def list_pending(
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
    current_user: User = Depends(get_current_user),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> ContentListResponse:
    """Review queue."""
    return _list(
        actor=current_user,
        repo=repo,
        policy=policy,
        rules=rules,
        status="pending",
        search=search,
        page=page,
        limit=limit,
    )


@router.get("/my-content", response_model=ContentListResponse)
def list_my_content(
    status: ContentStatus | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
    current_user: User = Depends(get_current_user),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
) -> ContentListResponse:
    """The caller's own submissions."""
    return _list(
        actor=current_user,
        repo=repo,
        policy=policy,
        rules=rules,
        status=status,
        search=search,
        page=page,
        limit=limit,
        mine_only=True,
    )


@router.post("/review/bulk", response_model=BulkReviewResponse)
def bulk_review(
    req: BulkReviewRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> BulkReviewResponse:
    result = run_bulk_review(
        BulkReviewInput(
            actor=current_user, content_ids=req.ids, status=req.status, reason=req.reason
        ),
        repo=repo,
        time=clock,
        rules=rules.review,
    )
    return BulkReviewResponse(
        succeeded=result.succeeded,
        failed=[
            BulkFailureModel(id=f.content_id, code=f.code, message=f.message)
            for f in result.failed
        ],
    )


@router.get("/{content_id}", response_model=ContentResponse)
def get_content(
    content_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> ContentResponse:
    result = run_get(
        GetContentInput(actor=current_user, content_id=content_id), repo=repo, policy=policy
    )
    return ContentResponse.from_entity(result.content)


@router.put("/{content_id}", response_model=UpdateResponse)
def update_content(
    content_id: UUID,
    req: ContentWriteRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> UpdateResponse:
    """Field update; status is left as is."""
    result = run_update(
        UpdateContentInput(
            actor=current_user,
            content_id=content_id,
            fields=req.to_fields(),
            expected_version=req.expected_version,
        ),
        repo=repo,
        time=clock,
        policy=policy,
    )
    return UpdateResponse(id=result.content.id, version=result.content.version)


@router.put("/{content_id}/status", response_model=ContentResponse)
def change_status(
    content_id: str,
    req: StatusChangeRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLiteContentRepo = Depends(get_content_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> ContentResponse:
    """Moderation: approve (verified) or reject (rejected, reason required)."""
    if req.status == "verified":
        result = run_approve(
            ApproveInput(actor=current_user, content_id=content_id),
            repo=repo,
            time=clock,
            rules=rules.review,
        )
    else:
        result = run_reject(
            RejectInput(actor=current_user, content_id=content_id, reason=req.reason),
            repo=repo,
            time=clock,
            rules=rules.review,
        )
    return ContentResponse.from_entity(result.content)
