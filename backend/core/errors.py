"""Error types raised while editing images.

Every error carries the message shown to the user and a short
``error_type`` code the API returns alongside it.
"""

API_KEY_NOT_CONFIGURED_MESSAGE = "API Key is not configured. Please set the GEMINI_API_KEY environment variable."
INVALID_API_KEY_MESSAGE = "The provided API key is not valid. Please check your configuration."
NO_IMAGE_DATA_MESSAGE = "No image data was found in the Gemini API response."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while communicating with the image editing service."
INVALID_IMAGE_FILE_MESSAGE = "Please select a valid image file."
MISSING_INPUT_MESSAGE = "Please upload an image and provide a prompt."
EDIT_IN_PROGRESS_MESSAGE = "An image edit is already in progress."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
IMAGE_STORE_FULL_MESSAGE = "Too many images are open right now. Please try again later."


class ImageEditError(Exception):
    """Base class for every failure of an edit attempt."""

    error_type = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiKeyNotConfiguredError(ImageEditError):
    error_type = "configuration"

    def __init__(self, message: str = API_KEY_NOT_CONFIGURED_MESSAGE):
        super().__init__(message)


class InvalidApiKeyError(ImageEditError):
    error_type = "invalid_api_key"

    def __init__(self, message: str = INVALID_API_KEY_MESSAGE):
        super().__init__(message)


class ImageEditFailedError(ImageEditError):
    """The remote call failed for any reason other than a bad key."""

    error_type = "transport"

    @classmethod
    def from_reason(cls, reason: str) -> "ImageEditFailedError":
        if not reason:
            return cls(UNKNOWN_ERROR_MESSAGE)
        return cls(f"Failed to edit image: {reason}")


class NoImageDataError(ImageEditError):
    error_type = "no_image_data"

    def __init__(self, message: str = f"Failed to edit image: {NO_IMAGE_DATA_MESSAGE}"):
        super().__init__(message)


class InputValidationError(ImageEditError):
    error_type = "validation"


class ImageStoreFullError(InputValidationError):
    """No room left for another uploaded image."""

    def __init__(self, message: str = IMAGE_STORE_FULL_MESSAGE):
        super().__init__(message)


class EditInProgressError(ImageEditError):
    error_type = "busy"

    def __init__(self, message: str = EDIT_IN_PROGRESS_MESSAGE):
        super().__init__(message)
