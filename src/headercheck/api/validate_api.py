from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.headercheck.config import get as get_config
from src.headercheck.validator.errors import CleanupError
from src.headercheck.validator.extensions import ALLOWED_EXTENSIONS
from src.headercheck.validator.processor import copy_to_temp, validate_path


router = APIRouter()


class ValidationResponse(BaseModel):
    ok: bool
    message: str
    detected_type: Optional[str] = None
    category: Optional[str] = None
    encoding: Optional[str] = None
    code: Optional[str] = None


@router.get("/validate/extensions")
def list_allowed_extensions():
    return {"allowed_extensions": sorted(ALLOWED_EXTENSIONS)}


@router.post("/validate", response_model=ValidationResponse)
async def validate_upload(
    file: UploadFile = File(..., description="File to check before ingestion"),
    verify_encoding: Optional[bool] = Form(None, description="Require CSV uploads to be UTF-8"),
):
    """
    Copy the upload to a temp file, check its header bytes, and delete the copy.
    Returns 200 with the detected type/category, or 422 with the rejection reason.
    """
    if verify_encoding is None:
        verify_encoding = bool(get_config("validation.verify_encoding", False))

    # Persist upload to a temp file so the checker reads a stable source
    try:
        tmp_path = copy_to_temp(file.file, file.filename)
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Failed to buffer upload: {e}")

    try:
        result = validate_path(tmp_path, file.filename, delete_after=True, verify_encoding=verify_encoding)
    except CleanupError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not result.ok:
        return JSONResponse(status_code=422, content=result.to_dict())
    return ValidationResponse(**result.to_dict())
