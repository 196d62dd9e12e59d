"""
Distribution component - assigns content to edge hubs.

Assign and unassign are idempotent: repeating either leaves exactly the same
join rows and is not an error. The join is keyed on the hub's internal
primary key; callers address hubs by their stable ``hub_id``.
"""

from __future__ import annotations

import logging

from contenthub.domain.entities import ContentHubAssignment, EdgeHub, User
from contenthub.domain.errors import InvalidTransitionError, NotFound
from contenthub.domain.policy import require_role
from contenthub.rules.models import DistributionRules

from .models import (
    AssignInput,
    AssignmentOutput,
    HubContentListOutput,
    ListHubContentInput,
    UnassignInput,
)
from .ports import AssignmentRepoPort, ContentLookupPort, HubRepoPort, TimePort

logger = logging.getLogger(__name__)


def _require_manager(actor: User | None, rules: DistributionRules) -> User:
    return require_role(actor, rules.manager_roles, action="manage distribution")


def _hub_or_404(hubs: HubRepoPort, hub_id: str) -> EdgeHub:
    hub = hubs.get_by_hub_id(hub_id)
    if hub is None:
        raise NotFound(f"Edge hub {hub_id} not found")
    return hub


def list_hubs(hubs: HubRepoPort) -> list[EdgeHub]:
    return sorted(hubs.list(), key=lambda h: h.name.lower())


def get_hub(hubs: HubRepoPort, hub_id: str) -> EdgeHub:
    return _hub_or_404(hubs, hub_id)


def run_assign(
    inp: AssignInput,
    *,
    hubs: HubRepoPort,
    content: ContentLookupPort,
    assignments: AssignmentRepoPort,
    time: TimePort,
    rules: DistributionRules | None = None,
) -> AssignmentOutput:
    """Ensure the (content, hub) pair exists."""
    rules = rules or DistributionRules()
    actor = _require_manager(inp.actor, rules)

    hub = _hub_or_404(hubs, inp.hub_id)
    item = content.get_by_id(inp.content_id)
    if item is None:
        raise NotFound(f"Content {inp.content_id} not found")

    if rules.require_verified and item.status != "verified":
        raise InvalidTransitionError(
            item.status, "assigned", "only verified content can be distributed"
        )

    created = assignments.add(
        ContentHubAssignment(
            content_id=item.id,
            hub_pk=hub.id,
            assigned_by=actor.id,
            assigned_at=time.now_utc(),
        )
    )
    if created:
        logger.info("Assigned content %s to hub %s by %s", item.id, hub.hub_id, actor.id)
    else:
        logger.debug("Content %s already assigned to hub %s", item.id, hub.hub_id)
    return AssignmentOutput(hub=hub, content_id=item.id, assigned=True, changed=created)


def run_unassign(
    inp: UnassignInput,
    *,
    hubs: HubRepoPort,
    content: ContentLookupPort,
    assignments: AssignmentRepoPort,
    rules: DistributionRules | None = None,
) -> AssignmentOutput:
    """Ensure the (content, hub) pair is absent. Always allowed for any status."""
    rules = rules or DistributionRules()
    actor = _require_manager(inp.actor, rules)

    hub = _hub_or_404(hubs, inp.hub_id)
    if content.get_by_id(inp.content_id) is None:
        raise NotFound(f"Content {inp.content_id} not found")

    removed = assignments.remove(inp.content_id, hub.id)
    if removed:
        logger.info("Unassigned content %s from hub %s by %s", inp.content_id, hub.hub_id, actor.id)
    return AssignmentOutput(hub=hub, content_id=inp.content_id, assigned=False, changed=removed)


def run_list_hub_content(
    inp: ListHubContentInput,
    *,
    hubs: HubRepoPort,
    assignments: AssignmentRepoPort,
    rules: DistributionRules | None = None,
    max_limit: int = 100,
) -> HubContentListOutput:
    """Paged content listing with each row flagged as assigned to the hub or not."""
    rules = rules or DistributionRules()
    _require_manager(inp.actor, rules)

    hub = _hub_or_404(hubs, inp.hub_id)
    page = max(1, inp.page)
    limit = min(max(1, inp.limit), max_limit)
    search = inp.search.strip() if inp.search else None

    items, total = assignments.list_hub_content(
        hub.id,
        assigned=inp.assigned,
        search=search or None,
        status=inp.status,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return HubContentListOutput(hub=hub, items=items, total=total, page=page, limit=limit)
