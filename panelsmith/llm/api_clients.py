"""
Panelsmith API Clients

Concrete implementations of the two generation capabilities.

Supports:
- Azure OpenAI / OpenAI chat completions with JSON-schema response format
  (structured generation)
- Bria FIBO v2 asynchronous image generation (image synthesis)
"""

import asyncio
import json
from typing import Any, Dict, Optional, Type

import httpx
import openai
from pydantic import ValidationError

from panelsmith.core.config import StructuredGenerationConfig, ImageSynthesisConfig
from panelsmith.core.env_loader import (
    get_azure_openai_api_key,
    get_azure_openai_endpoint,
    get_azure_openai_api_version,
    get_openai_api_key,
    get_fibo_api_key,
)
from panelsmith.core.exceptions import (
    CapabilityUnavailableError,
    MissingConfigError,
    SchemaViolationError,
)
from panelsmith.core.logging_config import get_logger
from panelsmith.core.retry import RetryConfig, retry_async_call
from panelsmith.core.structured_description import StructuredDescription

from .capabilities import (
    StructuredGenerator,
    ImageSynthesizer,
    ImageSynthesisRequest,
    ImageSynthesisResponse,
    SchemaT,
)

logger = get_logger("llm.api_clients")


def _strip_code_fences(text: str) -> str:
    """Remove a markdown code fence some deployments wrap JSON in."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


# ============================================================================
#  STRUCTURED GENERATION
# ============================================================================

class OpenAIStructuredGenerator(StructuredGenerator):
    """
    Structured generation over the OpenAI chat completions API.

    The target pydantic schema is sent as a ``json_schema`` response format and
    the reply is validated against the same model.
    """

    name = "structured_generation"

    def __init__(self, config: Optional[StructuredGenerationConfig] = None, client: Any = None):
        self.config = config or StructuredGenerationConfig(provider="openai")
        self._client = client

    def _create_client(self):
        api_key = get_openai_api_key()
        if not api_key:
            raise MissingConfigError("OPENAI_API_KEY is not set")
        # Retries are owned by the agents' retry policy
        return openai.AsyncOpenAI(api_key=api_key, max_retries=0)

    @property
    def client(self):
        if self._client is None:
            self._client = self._create_client()
        return self._client

    async def generate(
        self,
        instructions: str,
        user_prompt: str,
        output_schema: Type[SchemaT],
    ) -> SchemaT:
        request: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": instructions},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": output_schema.__name__,
                    "schema": output_schema.model_json_schema(by_alias=True),
                    "strict": False,
                },
            },
        }
        if self.config.temperature is not None:
            request["temperature"] = self.config.temperature

        try:
            response = await self.client.chat.completions.create(**request)
        except openai.APIStatusError as e:
            raise CapabilityUnavailableError(self.name, str(e), status_code=e.status_code)
        except openai.OpenAIError as e:
            raise CapabilityUnavailableError(self.name, str(e))

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise SchemaViolationError(self.name, "empty response")

        try:
            return output_schema.model_validate_json(_strip_code_fences(content))
        except ValidationError as e:
            logger.debug(f"Rejected structured output: {content[:500]}")
            raise SchemaViolationError(self.name, f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}")


class AzureStructuredGenerator(OpenAIStructuredGenerator):
    """Structured generation against an Azure OpenAI deployment."""

    def __init__(self, config: Optional[StructuredGenerationConfig] = None, client: Any = None):
        super().__init__(config or StructuredGenerationConfig(), client)

    def _create_client(self):
        api_key = get_azure_openai_api_key()
        endpoint = get_azure_openai_endpoint()
        if not api_key or not endpoint:
            raise MissingConfigError(
                "Azure OpenAI credentials are not set",
                {"required": ["AZURE_OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT"]},
            )
        return openai.AsyncAzureOpenAI(
            api_key=api_key,
            azure_endpoint=endpoint,
            api_version=get_azure_openai_api_version() or self.config.api_version,
            max_retries=0,
        )


def create_structured_generator(config: StructuredGenerationConfig) -> StructuredGenerator:
    """Build the structured generator for the configured provider."""
    if config.provider == "openai":
        return OpenAIStructuredGenerator(config)
    return AzureStructuredGenerator(config)


# ============================================================================
#  IMAGE SYNTHESIS (FIBO)
# ============================================================================

class FiboClient(ImageSynthesizer):
    """
    Client for the Bria FIBO v2 image generation API.

    Generation is submitted asynchronously and the returned ``status_url`` is
    polled until the request completes. Submission is retried on a fixed delay
    schedule; every failure surfaces as ``CapabilityUnavailableError``.
    """

    name = "image_synthesis"

    def __init__(
        self,
        config: Optional[ImageSynthesisConfig] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ImageSynthesisConfig()
        self._api_key = api_key
        self._transport = transport
        self._retry_config = RetryConfig.for_image_synthesis(self.config)

    @property
    def api_key(self) -> str:
        if not self._api_key:
            self._api_key = get_fibo_api_key()
        if not self._api_key:
            raise MissingConfigError("FIBO_API_KEY is not set")
        return self._api_key

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self.config.request_timeout,
            headers={"api_token": self.api_key},
        )

    def build_body(self, request: ImageSynthesisRequest) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "num_results": request.num_results,
            "aspect_ratio": request.aspect_ratio,
            "sync": False,
            # The API expects the structured prompt as a JSON string
            "structured_prompt": request.structured_description.to_json(),
            "model_version": self.config.model_version,
        }
        if request.seed is not None:
            body["seed"] = request.seed
        return body

    async def generate(self, request: ImageSynthesisRequest) -> ImageSynthesisResponse:
        body = self.build_body(request)
        async with self._http_client() as client:
            start = await retry_async_call(
                self._submit, client, body, config=self._retry_config
            )
            if start.get("status_url"):
                final = await self._poll(client, start["status_url"])
            else:
                final = start
        return self._parse_result(final)

    async def _submit(self, client: httpx.AsyncClient, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.config.base_url}/image/generate"
        try:
            response = await client.post(url, json=body)
        except httpx.HTTPError as e:
            raise CapabilityUnavailableError(self.name, f"request failed: {e}")
        return self._json_or_raise(response)

    async def _poll(self, client: httpx.AsyncClient, status_url: str) -> Dict[str, Any]:
        for _ in range(self.config.max_polling_attempts):
            try:
                response = await client.get(status_url)
            except httpx.HTTPError as e:
                raise CapabilityUnavailableError(self.name, f"polling failed: {e}")
            result = self._json_or_raise(response)

            status = str(result.get("status") or "").upper()
            if status == "COMPLETED" or (result.get("result") or {}).get("image_url"):
                return result
            if status == "FAILED":
                raise CapabilityUnavailableError(
                    self.name, result.get("error") or "image generation failed"
                )

            await asyncio.sleep(self.config.polling_interval)

        raise CapabilityUnavailableError(self.name, "image generation timed out")

    def _json_or_raise(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except json.JSONDecodeError:
            data = {}
        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            raise CapabilityUnavailableError(
                self.name,
                message or f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not isinstance(data, dict):
            raise CapabilityUnavailableError(self.name, "unexpected response body")
        return data

    def _parse_result(self, payload: Dict[str, Any]) -> ImageSynthesisResponse:
        result = payload.get("result") or {}
        image_url = result.get("image_url")
        if not image_url:
            raise CapabilityUnavailableError(self.name, "response carried no image url")

        seed = result.get("seed")
        return ImageSynthesisResponse(
            image_urls=[image_url],
            seed=int(seed) if seed is not None else None,
            structured_description_used=StructuredDescription.from_dict(result.get("structured_prompt")),
        )
