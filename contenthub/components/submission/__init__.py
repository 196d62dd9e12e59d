"""
Submission component - turns a valid draft into a create-or-update request.
"""

from .component import ContentSubmissionService, build_payload
from .models import GENERIC_SAVE_ERROR, SubmissionResult, SubmitMode
from .ports import ContentStorePort

__all__ = [
    "ContentSubmissionService",
    "build_payload",
    "GENERIC_SAVE_ERROR",
    "SubmissionResult",
    "SubmitMode",
    "ContentStorePort",
]
