from pydantic import BaseModel
from typing import Optional
from enum import Enum

class EditStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

class UploadedImage(BaseModel):
    image_id: str
    data: bytes
    mime_type: str
    filename: Optional[str] = None
    display_url: str

class EditRequest(BaseModel):
    image_data: str  # Base64 encoded image, no data URL prefix
    mime_type: str
    prompt: str

class Base64EditRequest(BaseModel):
    image_data: str  # Base64 or data URL encoded image
    mime_type: Optional[str] = None
    prompt: str

class ImageEditResponse(BaseModel):
    success: bool
    image_data_url: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

class UploadedImageInfo(BaseModel):
    filename: Optional[str] = None
    mime_type: str
    size_bytes: int
    display_url: str

class EditSessionView(BaseModel):
    session_id: str
    status: EditStatus
    is_loading: bool
    can_submit: bool
    image: Optional[UploadedImageInfo] = None
    prompt: str = ""
    result_data_url: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

class PromptUpdateRequest(BaseModel):
    prompt: str
