"""Gemini image provider client."""
import asyncio
import base64
import json
from typing import Any, Optional

from google import genai
from google.genai import errors
from google.genai import types

from webtoon_studio.core.logging import setup_logging
from webtoon_studio.models.character import ImagePart
from webtoon_studio.models.generation import FailureKind, ProviderOutcome

logger = setup_logging("provider")

SCENE_INSTRUCTION = "Create an image of a webtoon scene described as follows."
TEXT_EXCERPT_CHARS = 100
NO_API_KEY = "No API Key"


class ImageProviderClient:
    """Sends one multimodal request to the Gemini image model per call.

    The client never retries. Every call returns a ProviderOutcome holding
    either the image or a failure reason; provider errors are not raised.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-3-pro-image-preview",
        timeout_seconds: float = 300.0,
        aspect_ratio: str = "1:1",
        image_size: str = "2K",
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.aspect_ratio = aspect_ratio
        self.image_size = image_size

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def generate(self, prompt: str, images: list[ImagePart]) -> ProviderOutcome:
        """Request an image for the prompt and reference images.

        Args:
            prompt: Assembled prompt text.
            images: Reference images, sent after the text in this order.

        Returns:
            ProviderOutcome with image bytes, or a failure kind and diagnostic.
        """
        if not self.configured:
            return ProviderOutcome.failure(FailureKind.unavailable, NO_API_KEY)

        contents = self.build_contents(prompt, images)
        try:
            response = await asyncio.wait_for(
                self._call_provider(contents), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            reason = f"Timed out after {self.timeout_seconds:g}s waiting for image provider"
            logger.error(reason, extra={"failure_kind": FailureKind.timeout.value})
            return ProviderOutcome.failure(FailureKind.timeout, reason)
        except errors.APIError as exc:
            reason = f"{exc.code} {exc.status}: {_body_text(exc.details)}"
            logger.error(
                "Gemini Image API error: %s",
                reason,
                extra={"failure_kind": FailureKind.http_error.value},
            )
            return ProviderOutcome.failure(FailureKind.http_error, reason)
        except Exception as exc:
            logger.error(
                "Gemini image generation failed: %s: %s",
                type(exc).__name__,
                exc,
                exc_info=True,
                extra={"failure_kind": FailureKind.transport.value},
            )
            return ProviderOutcome.failure(FailureKind.transport, str(exc) or type(exc).__name__)

        return self.parse_response(response)

    def build_contents(self, prompt: str, images: list[ImagePart]) -> list[types.Content]:
        """Build a single user turn: the text part first, then each image part."""
        parts = [types.Part.from_text(text=f"{SCENE_INSTRUCTION}\n\n{prompt}")]
        for image in images:
            parts.append(types.Part.from_bytes(data=image.data, mime_type=image.mime_type))
        return [types.Content(role="user", parts=parts)]

    def _build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_modalities=["TEXT", "IMAGE"],
            image_config=types.ImageConfig(
                aspect_ratio=self.aspect_ratio,
                image_size=self.image_size,
            ),
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )

    async def _call_provider(self, contents: list[types.Content]) -> Any:
        """Issue the request through the genai async client."""
        client = genai.Client(
            api_key=self.api_key,
            http_options=types.HttpOptions(timeout=int(self.timeout_seconds * 1000)),
        )
        logger.info(
            "generate_content: model=%s, imageCount=%d",
            self.model,
            len(contents[0].parts or []) - 1,
        )
        return await client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=self._build_config(),
        )

    @staticmethod
    def parse_response(response: Any) -> ProviderOutcome:
        """Extract the first inline image from a response.

        A response carrying only text is a refusal; the diagnostic includes
        the first 100 characters of that text.
        """
        candidates = getattr(response, "candidates", None) or []
        content = getattr(candidates[0], "content", None) if candidates else None
        parts = getattr(content, "parts", None) or []

        texts: list[str] = []
        for part in parts:
            inline_data = getattr(part, "inline_data", None)
            if inline_data is not None and inline_data.data:
                data = inline_data.data
                if isinstance(data, str):
                    data = base64.b64decode(data)
                return ProviderOutcome.success(
                    bytes(data), inline_data.mime_type or "image/png"
                )
            text = getattr(part, "text", None)
            if isinstance(text, str) and text and not getattr(part, "thought", False):
                texts.append(text)

        excerpt: Optional[str] = None
        if texts:
            excerpt = "\n".join(texts)[:TEXT_EXCERPT_CHARS] + "..."
        reason = "No image data. Model generated text instead: " + (excerpt or "Unknown")
        logger.warning(reason, extra={"failure_kind": FailureKind.refusal.value})
        return ProviderOutcome.failure(FailureKind.refusal, reason)


def _body_text(details: Any) -> str:
    if isinstance(details, str):
        return details
    return json.dumps(details, ensure_ascii=False, default=str)
