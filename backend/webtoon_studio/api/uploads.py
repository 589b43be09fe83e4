"""Reference image upload router."""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from webtoon_studio.services.artifacts import ArtifactStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def get_artifact_store(request: Request) -> ArtifactStore:
    store: ArtifactStore | None = getattr(request.app.state, "artifact_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Artifact store unavailable.")
    return store


@router.post("")
async def upload_image(
    file: UploadFile = File(...),
    store: ArtifactStore = Depends(get_artifact_store),
) -> dict:
    """Store an uploaded character reference image.

    Returns:
        ``{"success": true, "url": "/uploads/<name>"}`` for use as a
        character's ``imageUrl``.

    Raises:
        HTTPException 400: Not an image, or empty.
        HTTPException 413: Larger than 10 MiB.
    """
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image uploads are accepted")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty upload")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Upload too large")
    url = store.save(data, content_type)
    logger.info("Uploaded %s as %s", file.filename, url)
    return {"success": True, "url": url}
