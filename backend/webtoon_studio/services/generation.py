"""GenerationService: orchestrates one scenario-to-image generation run."""
import asyncio
from typing import Optional

from webtoon_studio.core.logging import setup_logging
from webtoon_studio.models.generation import (
    GenerateRequest,
    GenerateResponse,
    GenerationHistoryItem,
    PlaceholderVariant,
)
from webtoon_studio.services.artifacts import ArtifactStore
from webtoon_studio.services.characters import CharacterReferenceLoader
from webtoon_studio.services.fallback import placeholder_url
from webtoon_studio.services.prompt import assemble_prompt
from webtoon_studio.services.provider import NO_API_KEY, ImageProviderClient
from webtoon_studio.services.records import RecordStore

logger = setup_logging("generation")


class GenerationService:
    """Orchestrates a single generation request.

    Responsibilities:
    1. Resolve character references (text + reference images)
    2. Assemble the prompt
    3. Call the image provider once, or fall back to a placeholder
    4. Store the provider image as an artifact
    5. Persist the Scenario + Generation pair
    6. Return the image reference, prompt and diagnostic

    State notes:
    - No per-request state is kept on the instance; concurrent calls are
      independent. There is no locking or rate limiting of provider calls.
    - Provider failures are recovered here and only reported through
      ``diagnostic``. Only persistence failures propagate to the caller.
    """

    def __init__(
        self,
        loader: CharacterReferenceLoader,
        provider: ImageProviderClient,
        artifacts: ArtifactStore,
        records: RecordStore,
        placeholder_delay_seconds: float = 1.0,
        history_limit: int = 10,
    ) -> None:
        self.loader = loader
        self.provider = provider
        self.artifacts = artifacts
        self.records = records
        self.placeholder_delay_seconds = placeholder_delay_seconds
        self.history_limit = history_limit

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Run the pipeline for one request.

        Args:
            request: Scenario text, ordered character ids and provider mode.

        Returns:
            GenerateResponse with the stored image URL or a placeholder URL.

        Raises:
            PersistenceError: When the scenario/generation pair cannot be written.
        """
        # --- 1. Resolve characters ---
        context = self.loader.load(request.character_ids)

        # --- 2. Assemble prompt ---
        prompt = assemble_prompt(request.scenario_text, context.characters, context.images)
        logger.info(
            "generate: characters=%d/%d images=%d mode=%s",
            len(context.characters),
            len(request.character_ids),
            len(prompt.images),
            request.provider_mode,
        )

        # --- 3. Generate or fall back ---
        diagnostic = ""
        stored_url: Optional[str] = None
        if self.provider.configured:
            outcome = await self.provider.generate(prompt.text, prompt.images)
            if outcome.image is not None:
                stored_url = self.artifacts.save(outcome.image.data, outcome.image.mime_type)
                image_url = stored_url
            else:
                diagnostic = outcome.error or ""
                kind = outcome.failure_kind.value if outcome.failure_kind else None
                logger.info(
                    "Falling back to placeholder image: %s",
                    diagnostic,
                    extra={"failure_kind": kind},
                )
                image_url = await self._placeholder(request.scenario_text, PlaceholderVariant.failed)
        else:
            if request.wants_gemini:
                diagnostic = NO_API_KEY
            image_url = await self._placeholder(request.scenario_text, PlaceholderVariant.disabled)

        # --- 4. Persist (an artifact with no record is removed) ---
        try:
            _, generation = self.records.create_generation(
                content=request.scenario_text,
                image_url=image_url,
                character_ids=request.character_ids,
                prompt=prompt.text,
            )
        except Exception:
            if stored_url is not None:
                self.artifacts.delete(stored_url)
            raise

        # --- 5. Respond ---
        return GenerateResponse(
            success=True,
            image_reference=generation.image_url,
            assembled_prompt=prompt.text,
            diagnostic=diagnostic,
        )

    def list_recent(self, limit: Optional[int] = None) -> list[GenerationHistoryItem]:
        """Return the most recent generations, newest first.

        ``limit`` defaults to the configured history size.
        """
        return self.records.list_recent(limit or self.history_limit)

    async def _placeholder(self, scenario_text: str, variant: PlaceholderVariant) -> str:
        if self.placeholder_delay_seconds > 0:
            await asyncio.sleep(self.placeholder_delay_seconds)
        return placeholder_url(scenario_text, variant)
