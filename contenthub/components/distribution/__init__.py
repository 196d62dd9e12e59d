"""
Distribution component - content to edge hub assignments.
"""

from .component import get_hub, list_hubs, run_assign, run_list_hub_content, run_unassign
from .models import (
    AssignInput,
    AssignmentOutput,
    HubContentListOutput,
    ListHubContentInput,
    UnassignInput,
)
from .ports import AssignmentRepoPort, ContentLookupPort, HubRepoPort, TimePort

__all__ = [
    # Entry points
    "get_hub",
    "list_hubs",
    "run_assign",
    "run_list_hub_content",
    "run_unassign",
    # Input models
    "AssignInput",
    "ListHubContentInput",
    "UnassignInput",
    # Output models
    "AssignmentOutput",
    "HubContentListOutput",
    # Ports
    "AssignmentRepoPort",
    "ContentLookupPort",
    "HubRepoPort",
    "TimePort",
]
