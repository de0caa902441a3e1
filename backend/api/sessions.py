from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from api.image_edit import get_gemini_service
from config.settings import Settings, get_settings
from core.errors import EditInProgressError, InputValidationError
from models.image_edit import EditSessionView, PromptUpdateRequest
from services.edit_session import EditSession
from services.gemini_service import GeminiImageService
from services.image_encoding import read_upload_bytes
from services.session_service import SessionLimitError, SessionService, get_session_service

router = APIRouter(prefix="/sessions", tags=["sessions"])

def get_session_or_404(session_id: str, session_service: SessionService) -> EditSession:
    session = session_service.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Edit session not found")
    return session

def raise_busy(error: EditInProgressError):
    raise HTTPException(status_code=409, detail=error.message)

@router.post("/", response_model=EditSessionView)
async def create_session(session_service: SessionService = Depends(get_session_service)):
    """Start a new edit session"""
    try:
        session = session_service.create_session()
    except SessionLimitError as e:
        raise HTTPException(status_code=503, detail=e.message)
    return session.view()

@router.get("/{session_id}", response_model=EditSessionView)
async def get_session(session_id: str, session_service: SessionService = Depends(get_session_service)):
    """Get the current display state of a session"""
    return get_session_or_404(session_id, session_service).view()

@router.post("/{session_id}/image", response_model=EditSessionView)
async def select_image(
    session_id: str,
    image: UploadFile = File(...),
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings)
):
    """Select a new image, replacing the previous one and any result"""
    session = get_session_or_404(session_id, session_service)

    # the session may start an edit while the upload is being read
    try:
        content = await read_upload_bytes(image, settings.MAX_UPLOAD_SIZE)
    except InputValidationError as e:
        try:
            session.reject_image(e.message, e.error_type)
        except EditInProgressError as busy:
            raise_busy(busy)
        return session.view()

    try:
        session.select_image(image.filename, image.content_type, content)
    except EditInProgressError as e:
        raise_busy(e)

    return session.view()

@router.put("/{session_id}/prompt", response_model=EditSessionView)
async def update_prompt(
    session_id: str,
    payload: PromptUpdateRequest,
    session_service: SessionService = Depends(get_session_service)
):
    """Set the edit prompt"""
    session = get_session_or_404(session_id, session_service)

    try:
        session.set_prompt(payload.prompt)
    except EditInProgressError as e:
        raise_busy(e)

    return session.view()

@router.post("/{session_id}/submit", response_model=EditSessionView)
async def submit_edit(
    session_id: str,
    session_service: SessionService = Depends(get_session_service),
    gemini_service: GeminiImageService = Depends(get_gemini_service)
):
    """Run the edit for the session's image and prompt"""
    session = get_session_or_404(session_id, session_service)

    try:
        await session.submit(gemini_service)
    except EditInProgressError as e:
        raise_busy(e)

    return session.view()

@router.delete("/{session_id}")
async def close_session(session_id: str, session_service: SessionService = Depends(get_session_service)):
    """Close a session and release its image URL"""
    if not session_service.close_session(session_id):
        raise HTTPException(status_code=404, detail="Edit session not found")

    return {"success": True, "error": None}
