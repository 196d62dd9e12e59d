"""
Draft component - multi-step authoring state machine for Content drafts.
"""

from .component import DraftForm, validate_body, validate_metadata
from .models import FIRST_STEP, LAST_STEP, STEP_NAMES, DraftStep, StepResult

__all__ = [
    "DraftForm",
    "validate_body",
    "validate_metadata",
    "DraftStep",
    "StepResult",
    "STEP_NAMES",
    "FIRST_STEP",
    "LAST_STEP",
]
