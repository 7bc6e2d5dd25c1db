"""Async HTTP client for an Ollama-compatible text-generation backend."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from subbatch.common.config import settings
from subbatch.common.exceptions import (
    BackendForbiddenError,
    BackendResponseError,
    BackendUnreachableError,
    InvalidAddressError,
)
from subbatch.common.schemas import ConnectionResult, ConnectionStatus, ModelDescriptor
from subbatch.common.string_utils import truncate_for_logging
from subbatch.common.utils import URLUtils, ValidationUtils

logger = logging.getLogger(__name__)

TAGS_PATH = "/api/tags"
GENERATE_PATH = "/api/generate"

normalize_host = URLUtils.normalize_host


class OllamaClient:
    """
    Talks to the backend's /api/tags and /api/generate endpoints.

    Addresses are passed per call and normalized on every request, so the
    caller's stored address is never rewritten. Use as an async context
    manager, or call aclose() when done.
    """

    def __init__(
        self,
        probe_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
        temperature: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            probe_timeout: Seconds allowed for reachability checks and model listing
            request_timeout: Seconds allowed for one generation call
            temperature: Sampling temperature sent with generation calls
            transport: Optional httpx transport (used by tests)
        """
        self.probe_timeout = probe_timeout or settings.ollama_probe_timeout
        self.request_timeout = request_timeout or settings.ollama_request_timeout
        self.temperature = (
            settings.translation_temperature if temperature is None else temperature
        )
        self._client = httpx.AsyncClient(transport=transport)

    async def __aenter__(self) -> "OllamaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _base_url(address: str) -> str:
        """
        Normalize and validate an address.

        Raises:
            InvalidAddressError: If the normalized address is not a valid URL
        """
        base_url = normalize_host(address)
        if not ValidationUtils.is_valid_url_format(base_url):
            raise InvalidAddressError(address)
        return base_url

    async def probe(self, address: str) -> ConnectionResult:
        """
        Check that the backend is reachable and accepts our requests.

        Args:
            address: Raw backend address

        Returns:
            ConnectionResult; errors are reported as a status, never raised
        """
        try:
            base_url = self._base_url(address)
        except InvalidAddressError as e:
            logger.warning(f"⚠️  {e}")
            return ConnectionResult(
                status=ConnectionStatus.INVALID_ADDRESS, detail=str(e)
            )

        url = URLUtils.join(base_url, TAGS_PATH)
        try:
            response = await self._client.get(url, timeout=self.probe_timeout)
        except httpx.HTTPError as e:
            logger.warning(f"⚠️  Backend unreachable at {url}: {e!r}")
            return ConnectionResult(
                status=ConnectionStatus.UNREACHABLE,
                detail=f"{type(e).__name__}: {e}",
            )

        if response.is_success:
            logger.info(f"✅ Backend reachable at {base_url}")
            return ConnectionResult(status=ConnectionStatus.OK)

        if response.status_code == 403:
            logger.warning(f"⚠️  Backend at {base_url} refused the request (403)")
            return ConnectionResult(
                status=ConnectionStatus.FORBIDDEN, detail="HTTP 403"
            )

        logger.warning(
            f"⚠️  Backend at {base_url} returned HTTP {response.status_code}"
        )
        return ConnectionResult(
            status=ConnectionStatus.UNREACHABLE,
            detail=f"HTTP {response.status_code}",
        )

    async def list_models(self, address: str) -> List[ModelDescriptor]:
        """
        List models available on the backend.

        Discovery is best-effort: any failure is logged and yields an empty list.

        Args:
            address: Raw backend address

        Returns:
            Models in the order the backend reports them
        """
        try:
            base_url = self._base_url(address)
            response = await self._client.get(
                URLUtils.join(base_url, TAGS_PATH), timeout=self.probe_timeout
            )
            response.raise_for_status()
            data = response.json()
            models = [ModelDescriptor(**item) for item in data.get("models") or []]
        except Exception as e:
            logger.error(f"❌ Failed to fetch models: {e}")
            return []

        logger.info(f"Found {len(models)} model(s) on {base_url}")
        return models

    def _build_generate_body(self, model: str, prompt: str) -> Dict[str, Any]:
        return {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.temperature},
        }

    async def generate(self, address: str, model: str, prompt: str) -> str:
        """
        Run one non-streaming generation call.

        Args:
            address: Raw backend address
            model: Model name
            prompt: Full prompt text

        Returns:
            The trimmed `response` field of the backend reply

        Raises:
            InvalidAddressError: If the address is malformed
            BackendUnreachableError: On transport failure or timeout
            BackendForbiddenError: On HTTP 403
            BackendResponseError: On other non-success status or unusable body
        """
        base_url = self._base_url(address)
        url = URLUtils.join(base_url, GENERATE_PATH)

        try:
            response = await self._client.post(
                url,
                json=self._build_generate_body(model, prompt),
                timeout=self.request_timeout,
            )
        except httpx.TimeoutException as e:
            raise BackendUnreachableError(
                f"Generation request to {url} timed out after {self.request_timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise BackendUnreachableError(
                f"Generation request to {url} failed: {e!r}"
            ) from e

        if response.status_code == 403:
            raise BackendForbiddenError(url)

        if not response.is_success:
            raise BackendResponseError(
                f"Translation request failed with HTTP {response.status_code}: "
                f"{truncate_for_logging(response.text, max_length=200, edge_length=100)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BackendResponseError(
                f"Backend returned non-JSON body: {truncate_for_logging(response.text)}",
                status_code=response.status_code,
            ) from e

        output = data.get("response") if isinstance(data, dict) else None
        if not isinstance(output, str):
            raise BackendResponseError(
                "Backend reply has no 'response' string field",
                status_code=response.status_code,
            )

        logger.debug(f"Raw backend output: {truncate_for_logging(output)}")
        return output.strip()
