from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends

from contenthub.adapters.clock import SystemClock
from contenthub.adapters.sqlite.repos import SQLiteAssignmentRepo, SQLiteContentRepo, SQLiteHubRepo
from contenthub.api.deps import (
    get_assignment_repo,
    get_clock,
    get_content_repo,
    get_current_user,
    get_hub_repo,
    get_optional_user,
    get_policy,
    get_rules,
)
from contenthub.api.schemas import (
    AssignmentResponse,
    HubContentItemResponse,
    HubContentListResponse,
    HubDetailResponse,
    HubListResponse,
    HubResponse,
)
from contenthub.components.distribution import (
    AssignInput,
    AssignmentOutput,
    ListHubContentInput,
    UnassignInput,
    get_hub,
    list_hubs,
    run_assign,
    run_list_hub_content,
    run_unassign,
)
from contenthub.domain.entities import AssignedFilter, ContentStatus, User
from contenthub.domain.policy import PolicyEngine
from contenthub.rules.models import Rules

router = APIRouter()

# Older clients send assigned=true/false
AssignedQuery = Literal["all", "assigned", "unassigned", "true", "false"]
_ASSIGNED_VIEWS: dict[str, AssignedFilter] = {
    "all": "all",
    "assigned": "assigned",
    "unassigned": "unassigned",
    "true": "assigned",
    "false": "unassigned",
}


def _assignment_response(result: AssignmentOutput) -> AssignmentResponse:
    return AssignmentResponse(
        hub_id=result.hub.hub_id,
        content_id=result.content_id,
        assigned=result.assigned,
        changed=result.changed,
    )


@router.get("", response_model=HubListResponse)
def list_edge_hubs(
    current_user: User | None = Depends(get_optional_user),
    hubs: SQLiteHubRepo = Depends(get_hub_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> HubListResponse:
    policy.ensure_allowed(current_user, "hubs:read")
    return HubListResponse(items=[HubResponse.from_entity(h) for h in list_hubs(hubs)])


@router.get("/{hub_id}", response_model=HubDetailResponse)
def get_edge_hub(
    hub_id: str,
    current_user: User | None = Depends(get_optional_user),
    hubs: SQLiteHubRepo = Depends(get_hub_repo),
    assignments: SQLiteAssignmentRepo = Depends(get_assignment_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> HubDetailResponse:
    policy.ensure_allowed(current_user, "hubs:read")
    hub = get_hub(hubs, hub_id)
    base = HubResponse.from_entity(hub)
    return HubDetailResponse(
        **base.model_dump(),
        assigned_count=assignments.count_for_hub(hub.id),
    )


@router.get("/{hub_id}/content", response_model=HubContentListResponse)
def list_edge_hub_content(
    hub_id: str,
    assigned: AssignedQuery = "all",
    search: str | None = None,
    status: ContentStatus | None = None,
    page: int = 1,
    limit: int | None = None,
    current_user: User = Depends(get_current_user),
    hubs: SQLiteHubRepo = Depends(get_hub_repo),
    assignments: SQLiteAssignmentRepo = Depends(get_assignment_repo),
    rules: Rules = Depends(get_rules),
) -> HubContentListResponse:
    """Content joined with its assignment flag for this hub."""
    view = _ASSIGNED_VIEWS[assigned]
    result = run_list_hub_content(
        ListHubContentInput(
            actor=current_user,
            hub_id=hub_id,
            assigned=view,
            search=search,
            status=status,
            page=page,
            limit=limit or rules.pagination.default_limit,
        ),
        hubs=hubs,
        assignments=assignments,
        rules=rules.distribution,
        max_limit=rules.pagination.max_limit,
    )
    return HubContentListResponse(
        hub=HubResponse.from_entity(result.hub),
        assigned=view,
        items=[HubContentItemResponse.from_entity(i) for i in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.post("/{hub_id}/content/{content_id}", response_model=AssignmentResponse)
def assign_content(
    hub_id: str,
    content_id: UUID,
    current_user: User = Depends(get_current_user),
    hubs: SQLiteHubRepo = Depends(get_hub_repo),
    content: SQLiteContentRepo = Depends(get_content_repo),
    assignments: SQLiteAssignmentRepo = Depends(get_assignment_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> AssignmentResponse:
    result = run_assign(
        AssignInput(actor=current_user, hub_id=hub_id, content_id=content_id),
        hubs=hubs,
        content=content,
        assignments=assignments,
        time=clock,
        rules=rules.distribution,
    )
    return _assignment_response(result)


@router.delete("/{hub_id}/content/{content_id}", response_model=AssignmentResponse)
def unassign_content(
    hub_id: str,
    content_id: UUID,
    current_user: User = Depends(get_current_user),
    hubs: SQLiteHubRepo = Depends(get_hub_repo),
    content: SQLiteContentRepo = Depends(get_content_repo),
    assignments: SQLiteAssignmentRepo = Depends(get_assignment_repo),
    rules: Rules = Depends(get_rules),
) -> AssignmentResponse:
    result = run_unassign(
        UnassignInput(actor=current_user, hub_id=hub_id, content_id=content_id),
        hubs=hubs,
        content=content,
        assignments=assignments,
        rules=rules.distribution,
    )
    return _assignment_response(result)
