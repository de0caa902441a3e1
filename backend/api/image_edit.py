from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import Optional

from config.settings import Settings, get_settings
from core.errors import (
    ImageEditError,
    InputValidationError,
    INVALID_IMAGE_FILE_MESSAGE,
    MISSING_INPUT_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
)
from models.image_edit import Base64EditRequest, ImageEditResponse
from services.gemini_service import GeminiImageService
from services.image_encoding import (
    is_image_mime_type,
    mime_type_from_data_url,
    read_upload_as_base64,
    strip_data_url_prefix,
    to_data_url,
)

router = APIRouter(prefix="/image-edit", tags=["image-edit"])

def get_gemini_service(settings: Settings = Depends(get_settings)) -> GeminiImageService:
    return GeminiImageService.from_settings(settings)

def validation_failure(message: str) -> ImageEditResponse:
    return ImageEditResponse(success=False, error=message, error_type=InputValidationError.error_type)

async def run_edit(
    gemini_service: GeminiImageService,
    base64_data: str,
    mime_type: str,
    prompt: str
) -> ImageEditResponse:
    """Call Gemini once and turn the outcome into a response"""
    try:
        edited_base64 = await gemini_service.edit_image(base64_data, mime_type, prompt)
        return ImageEditResponse(
            success=True,
            image_data_url=to_data_url(edited_base64, mime_type),
            error=None
        )
    except ImageEditError as e:
        return ImageEditResponse(success=False, error=e.message, error_type=e.error_type)
    except Exception as e:
        print(f"❌ Unexpected error during image edit: {e}")
        return ImageEditResponse(success=False, error=UNEXPECTED_ERROR_MESSAGE, error_type="error")

@router.post("/", response_model=ImageEditResponse)
async def edit_image(
    image: Optional[UploadFile] = File(None),
    prompt: str = Form(""),
    gemini_service: GeminiImageService = Depends(get_gemini_service),
    settings: Settings = Depends(get_settings)
):
    """Edit an uploaded image with Gemini in a single request"""
    if image is None or not prompt.strip():
        return validation_failure(MISSING_INPUT_MESSAGE)

    if not is_image_mime_type(image.content_type):
        return validation_failure(INVALID_IMAGE_FILE_MESSAGE)

    try:
        base64_data = await read_upload_as_base64(image, settings.MAX_UPLOAD_SIZE)
    except InputValidationError as e:
        return validation_failure(e.message)

    return await run_edit(gemini_service, base64_data, image.content_type, prompt)

@router.post("/base64", response_model=ImageEditResponse)
async def edit_base64_image(
    edit_request: Base64EditRequest,
    gemini_service: GeminiImageService = Depends(get_gemini_service)
):
    """Edit a base64 or data URL encoded image with Gemini"""
    mime_type = edit_request.mime_type or mime_type_from_data_url(edit_request.image_data)
    if not is_image_mime_type(mime_type):
        return validation_failure(INVALID_IMAGE_FILE_MESSAGE)

    base64_data = strip_data_url_prefix(edit_request.image_data)
    if not base64_data or not edit_request.prompt.strip():
        return validation_failure(MISSING_INPUT_MESSAGE)

    return await run_edit(gemini_service, base64_data, mime_type, edit_request.prompt)

@router.get("/health")
async def check_gemini_config(settings: Settings = Depends(get_settings)):
    """Check if the Gemini API key is configured"""
    has_key = settings.is_gemini_configured

    return {
        "configured": has_key,
        "message": "Gemini API key configured" if has_key else "Gemini API key not set",
        "model": settings.GEMINI_MODEL
    }
