"""
Storage endpoint - media uploads (profile photos, posters) to S3
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from cinegrok.app.core.dependencies import get_current_user
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.user import User
from cinegrok.app.services import s3_service

logger = get_logger("api.storage")

router = APIRouter()


@router.post("/upload")
async def upload(
    file: UploadFile = File(...),
    path: str = Form(""),
    bucket: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
):
    """
    Upload a media file.

    - **file**: the file
    - **path**: sub-folder, e.g. "profile-photos"
    - **bucket**: optional bucket override

    Returns:
        - **publicUrl**: URL to store in the profile
    """
    if not path.strip():
        raise HTTPException(status_code=400, detail="File and path are required")
    if not s3_service.is_configured():
        logger.warning("Upload rejected - storage not configured user_id=%s", current_user.id)
        raise HTTPException(status_code=503, detail="File storage is not configured")

    try:
        contents = await file.read()
    except Exception as e:
        logger.exception("Upload failed - could not read file user_id=%s error=%s", current_user.id, e)
        raise HTTPException(status_code=500, detail="Failed to read file")

    try:
        result = s3_service.upload_file_to_s3(
            file_buffer=contents,
            file_name=file.filename or "",
            path=f"{current_user.id}/{path}",
            bucket=bucket or None,
            mime_type=file.content_type or "application/octet-stream",
        )
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.exception("Upload failed user_id=%s error=%s", current_user.id, e)
        raise HTTPException(status_code=500, detail="Upload failed")
    return {"publicUrl": result["url"]}
