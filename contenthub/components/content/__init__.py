"""
Content component - server-side create/update/read of Content.
"""

from .component import (
    parse_submitted_countries,
    parse_submitted_questions,
    run_create,
    run_get,
    run_list,
    run_update,
    validate_content_fields,
)
from .models import (
    ContentFields,
    ContentListOutput,
    ContentOutput,
    CreateContentInput,
    GetContentInput,
    ListContentInput,
    UpdateContentInput,
)
from .ports import ContentRepoPort, TimePort

__all__ = [
    # Entry points
    "run_create",
    "run_get",
    "run_list",
    "run_update",
    # Validation
    "parse_submitted_countries",
    "parse_submitted_questions",
    "validate_content_fields",
    # Input models
    "ContentFields",
    "CreateContentInput",
    "GetContentInput",
    "ListContentInput",
    "UpdateContentInput",
    # Output models
    "ContentListOutput",
    "ContentOutput",
    # Ports
    "ContentRepoPort",
    "TimePort",
]
