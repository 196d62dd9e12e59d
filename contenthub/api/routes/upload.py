import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from contenthub.adapters.fs.filestore import FileSystemStore
from contenthub.api.deps import (
    Settings,
    get_current_user,
    get_file_store,
    get_policy,
    get_rules,
    get_settings,
)
from contenthub.api.schemas import UploadResponse
from contenthub.components.cover_upload import SelectedFile, validate_file
from contenthub.domain.entities import User
from contenthub.domain.errors import NotFound, UploadFailed
from contenthub.domain.policy import PolicyEngine
from contenthub.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload/image", response_model=UploadResponse)
async def upload_image(
    image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
    store: FileSystemStore = Depends(get_file_store),
    settings: Settings = Depends(get_settings),
) -> UploadResponse:
    """Store a cover image and return its public URL."""
    policy.require_permission(current_user, "upload:image")

    # At most one byte past the limit
    data = await image.read(rules.uploads.max_upload_bytes + 1)
    selected = SelectedFile(
        filename=image.filename or "upload",
        content_type=image.content_type or "",
        data=data,
    )

    errors = validate_file(selected, rules.uploads)
    allowlist = rules.uploads.allowlist_mime_types
    if not errors and allowlist and selected.content_type not in allowlist:
        raise UploadFailed(f"Unsupported image type: {selected.content_type}")
    if errors:
        raise UploadFailed(errors[0].message)

    name = store.save_image(selected.data, selected.content_type)
    logger.info("Stored upload %s (%d bytes) for %s", name, selected.size, current_user.id)
    return UploadResponse(url=f"{settings.public_url}/uploads/{name}")


@router.get("/uploads/{name}")
def get_upload(name: str, store: FileSystemStore = Depends(get_file_store)) -> Response:
    try:
        data = store.get(name)
    except (FileNotFoundError, ValueError) as e:
        raise NotFound("Image not found") from e
    return Response(
        content=data,
        media_type=store.media_type(name),
        headers={
            "Cache-Control": "public, max-age=31536000, immutable",
            "X-Content-Type-Options": "nosniff",
        },
    )
