"""
Cover upload component - upload-then-reference flow for cover images.
"""

from .component import (
    CoverImageFlow,
    make_preview,
    validate_file,
    validate_mime_type,
    validate_size,
)
from .models import CoverUploadSnapshot, SelectedFile, UploadState
from .ports import CoverTargetPort, ImageUploaderPort

__all__ = [
    "CoverImageFlow",
    "make_preview",
    "validate_file",
    "validate_mime_type",
    "validate_size",
    "CoverUploadSnapshot",
    "SelectedFile",
    "UploadState",
    "CoverTargetPort",
    "ImageUploaderPort",
]
