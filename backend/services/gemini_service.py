import httpx
from typing import Any, Dict, List, Optional

from config.settings import Settings
from core.errors import (
    ApiKeyNotConfiguredError,
    ImageEditError,
    ImageEditFailedError,
    InvalidApiKeyError,
    NoImageDataError,
)

INVALID_API_KEY_REASON = "API_KEY_INVALID"
INVALID_API_KEY_SIGNATURE = "API key not valid"


class GeminiImageService:
    """Client for Gemini's image-output ``generateContent`` endpoint.

    One request per edit: no retries, no streaming. Pass ``http_client`` to
    share a connection pool or to swap in a fake transport.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.5-flash-image",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "GeminiImageService":
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.GEMINI_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(self, base64_image_data: str, mime_type: str, prompt: str) -> Dict[str, Any]:
        return {
            "contents": {
                "parts": [
                    {
                        "inlineData": {
                            "data": base64_image_data,
                            "mimeType": mime_type,
                        }
                    },
                    {"text": prompt},
                ]
            },
            "generationConfig": {"responseModalities": ["IMAGE"]},
        }

    async def edit_image(self, base64_image_data: str, mime_type: str, prompt: str) -> str:
        """Edit an image and return the edited image as base64.

        Raises:
            ApiKeyNotConfiguredError: no API key, raised before any request
            InvalidApiKeyError: the service rejected the key
            NoImageDataError: the response carried no inline image
            ImageEditFailedError: any other remote failure
        """
        if not self.api_key:
            raise ApiKeyNotConfiguredError()

        payload = self.build_payload(base64_image_data, mime_type, prompt)
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

        try:
            print(f"🔍 Calling Gemini model {self.model}: mime_type={mime_type}, prompt_len={len(prompt)}")
            if self.http_client is not None:
                response = await self.http_client.post(self.endpoint, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.endpoint, json=payload, headers=headers)

            if response.status_code != 200:
                raise self._translate_error_response(response)

            image_data = extract_inline_image_data(response.json())
            if image_data is None:
                raise NoImageDataError()

            print(f"✅ Gemini returned edited image ({len(image_data)} base64 chars)")
            return image_data

        except ImageEditError as error:
            print(f"❌ Error editing image with Gemini: {error.message}")
            raise
        except Exception as error:
            print(f"❌ Error editing image with Gemini: {error}")
            raise translate_error_message(str(error)) from error

    def _translate_error_response(self, response: httpx.Response) -> ImageEditError:
        """Map a non-200 Gemini response to an edit error.

        The structured ``ErrorInfo.reason`` is checked first; the message
        text is only inspected when no reason is present.
        """
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            error_data = {}
        error = error_data.get("error") if isinstance(error_data, dict) else None
        if not isinstance(error, dict):
            error = {}

        reasons = _error_reasons(error)
        if INVALID_API_KEY_REASON in reasons:
            return InvalidApiKeyError()

        message = error.get("message") or f"API request failed: {response.status_code}"
        return translate_error_message(message)


def translate_error_message(message: str) -> ImageEditError:
    if INVALID_API_KEY_SIGNATURE in (message or ""):
        return InvalidApiKeyError()
    return ImageEditFailedError.from_reason(message)


def _error_reasons(error: Dict[str, Any]) -> List[str]:
    reasons = []
    for detail in error.get("details") or []:
        if isinstance(detail, dict) and detail.get("reason"):
            reasons.append(detail["reason"])
    return reasons


def extract_inline_image_data(response_json: Dict[str, Any]) -> Optional[str]:
    """Return the data of the first inline image part of the first candidate"""
    candidates = response_json.get("candidates") or []
    if not candidates:
        return None

    content = candidates[0].get("content") or {}
    for part in content.get("parts") or []:
        inline_data = part.get("inlineData") or part.get("inline_data")
        if inline_data and inline_data.get("data"):
            return inline_data["data"]

    return None
