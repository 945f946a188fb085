"""HTTP client for the chat-completions endpoint used to generate exercises."""
import json
import logging
from typing import Any, Dict, Optional

import httpx

from vocabkit.config import GenerationSettings
from vocabkit.exceptions import (
    HTTPError,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    NoCredentialError,
)

logger = logging.getLogger(__name__)


class GenerationClient:
    """Sends one system + one user message and returns the reply text.

    Each call makes exactly one request. Timeouts come from the settings;
    retries, if wanted, are layered on top (see :mod:`vocabkit.services.retry`).
    """

    def __init__(self, settings: GenerationSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._http_client

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "GenerationClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _endpoint(self) -> httpx.URL:
        try:
            url = httpx.URL(self.settings.api_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidURLError(f"Invalid generation endpoint: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURLError(f"Invalid generation endpoint: {self.settings.api_url!r}")
        return url

    def build_request_body(self, system_prompt: str, user_payload: str, structured_output: bool) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_payload},
            ],
            "temperature": self.settings.temperature,
        }
        if structured_output:
            body["response_format"] = {"type": "json_object"}
        return body

    async def send(self, system_prompt: str, user_payload: str, structured_output: bool = False) -> str:
        """Send a chat request and return the first choice's message content.

        Raises:
            NoCredentialError: no API key is configured (nothing is sent).
            InvalidURLError: the configured endpoint is not an http(s) URL.
            NetworkError: connection, DNS or timeout failure.
            HTTPError: the service answered with a non-2xx status.
            InvalidResponseError: the body is not a usable completion.
        """
        api_key = self.settings.resolve_api_key()
        if not api_key:
            raise NoCredentialError()

        url = self._endpoint()
        body = self.build_request_body(system_prompt, user_payload, structured_output)
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        logger.info(f"Sending generation request to {url.host} (model: {self.settings.model})")
        try:
            response = await self.http_client.post(url, json=body, headers=headers)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidURLError(f"Invalid generation endpoint: {e}") from e
        except httpx.DecodingError as e:
            raise InvalidResponseError(f"Response body could not be decoded: {e}") from e
        except httpx.TransportError as e:
            logger.warning(f"Generation request failed: {type(e).__name__}: {e}")
            raise NetworkError(f"Network error: {e}") from e
        except httpx.RequestError as e:
            logger.warning(f"Generation request failed: {type(e).__name__}: {e}")
            raise NetworkError(f"Request failed: {e}") from e

        if not response.is_success:
            message = self._error_message(response)
            logger.warning(f"Generation service returned HTTP {response.status_code}: {message}")
            raise HTTPError(response.status_code, message)

        return self._extract_content(response)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull ``error.message`` out of a JSON error body, else return the raw body."""
        try:
            payload = response.json()
        except ValueError:
            return response.text
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
            if isinstance(error, str):
                return error
        return response.text

    @staticmethod
    def _extract_content(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except (ValueError, json.JSONDecodeError) as e:
            raise InvalidResponseError(f"Response body is not JSON: {e}") from e

        if not isinstance(payload, dict):
            raise InvalidResponseError("Response body is not a JSON object")

        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise InvalidResponseError("Response contains no choices")

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise InvalidResponseError("Response contains no message content")
        return content
