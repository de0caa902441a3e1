from dataclasses import dataclass
from typing import Optional

from core.errors import (
    EditInProgressError,
    ImageEditError,
    InputValidationError,
    INVALID_IMAGE_FILE_MESSAGE,
    MISSING_INPUT_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
)
from core.image_store import ImageStore, image_url
from models.image_edit import (
    EditRequest,
    EditSessionView,
    EditStatus,
    UploadedImage,
    UploadedImageInfo,
)
from services.gemini_service import GeminiImageService
from services.image_encoding import encode_base64, is_image_mime_type, to_data_url


@dataclass(frozen=True)
class EditState:
    """Display state of a session.

    ``result_data_url`` is only set when succeeded, ``error`` only when failed.
    """

    status: EditStatus
    result_data_url: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def idle(cls) -> "EditState":
        return cls(EditStatus.IDLE)

    @classmethod
    def pending(cls) -> "EditState":
        return cls(EditStatus.PENDING)

    @classmethod
    def succeeded(cls, result_data_url: str) -> "EditState":
        return cls(EditStatus.SUCCEEDED, result_data_url=result_data_url)

    @classmethod
    def failed(cls, error: str, error_type: str = "error") -> "EditState":
        return cls(EditStatus.FAILED, error=error, error_type=error_type)


class EditSession:
    """One user's image, prompt and edit state.

    A session runs at most one edit at a time: ``submit`` is refused while
    the state is pending.
    """

    def __init__(self, session_id: str, image_store: ImageStore):
        self.session_id = session_id
        self.image_store = image_store
        self.image: Optional[UploadedImage] = None
        self.prompt = ""
        self.state = EditState.idle()

    @property
    def is_pending(self) -> bool:
        return self.state.status == EditStatus.PENDING

    @property
    def can_submit(self) -> bool:
        return self.image is not None and bool(self.prompt.strip()) and not self.is_pending

    def select_image(self, filename: Optional[str], mime_type: Optional[str], data: bytes) -> EditState:
        """Replace the current image and clear any previous result or error"""
        if self.is_pending:
            raise EditInProgressError()

        if not is_image_mime_type(mime_type):
            self.state = EditState.failed(INVALID_IMAGE_FILE_MESSAGE, InputValidationError.error_type)
            return self.state

        previous_id = self.image.image_id if self.image is not None else None
        try:
            image_id = self.image_store.put(data, mime_type, filename, replaces=previous_id)
        except InputValidationError as error:
            # replacing only fails when the previous image had already expired
            self.image = None
            self.state = EditState.failed(error.message, error.error_type)
            return self.state

        self.image = UploadedImage(
            image_id=image_id,
            data=data,
            mime_type=mime_type,
            filename=filename,
            display_url=image_url(image_id),
        )
        self.state = EditState.idle()
        return self.state

    def reject_image(self, message: str, error_type: str = InputValidationError.error_type) -> EditState:
        """Show an upload error without touching the current image"""
        if self.is_pending:
            raise EditInProgressError()
        self.state = EditState.failed(message, error_type)
        return self.state

    def set_prompt(self, prompt: str) -> None:
        if self.is_pending:
            raise EditInProgressError()
        self.prompt = prompt or ""

    async def submit(self, client: GeminiImageService) -> EditState:
        """Run one edit with the current image and prompt.

        Raises EditInProgressError while an edit is pending. Every other
        failure ends in a failed state; the session is never left pending.
        """
        if self.is_pending:
            raise EditInProgressError()

        if self.image is None or not self.prompt.strip():
            self.state = EditState.failed(MISSING_INPUT_MESSAGE, InputValidationError.error_type)
            return self.state

        image = self.image
        self.state = EditState.pending()
        try:
            request = EditRequest(
                image_data=encode_base64(image.data),
                mime_type=image.mime_type,
                prompt=self.prompt,
            )
            edited_base64 = await client.edit_image(request.image_data, request.mime_type, request.prompt)
            self.state = EditState.succeeded(to_data_url(edited_base64, image.mime_type))
        except ImageEditError as error:
            self.state = EditState.failed(error.message, error.error_type)
        except Exception as error:
            print(f"❌ Unexpected error in session {self.session_id}: {error}")
            self.state = EditState.failed(UNEXPECTED_ERROR_MESSAGE)
        finally:
            if self.is_pending:
                self.state = EditState.failed(UNEXPECTED_ERROR_MESSAGE)

        return self.state

    def keep_alive(self) -> None:
        if self.image is not None:
            self.image_store.touch(self.image.image_id)

    def close(self) -> None:
        """Release the display URL of the current image"""
        self._release_image()
        self.image = None

    def _release_image(self) -> None:
        if self.image is not None:
            self.image_store.release(self.image.image_id)

    def view(self) -> EditSessionView:
        image_info = None
        if self.image is not None:
            image_info = UploadedImageInfo(
                filename=self.image.filename,
                mime_type=self.image.mime_type,
                size_bytes=len(self.image.data),
                display_url=self.image.display_url,
            )

        return EditSessionView(
            session_id=self.session_id,
            status=self.state.status,
            is_loading=self.is_pending,
            can_submit=self.can_submit,
            image=image_info,
            prompt=self.prompt,
            result_data_url=self.state.result_data_url,
            error=self.state.error,
            error_type=self.state.error_type,
        )
