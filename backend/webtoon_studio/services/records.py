"""Scenario and Generation persistence in Firestore."""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import firestore

from webtoon_studio.models.generation import (
    GenerationHistoryItem,
    GenerationRecord,
    ScenarioRecord,
)

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the scenario/generation pair could not be written."""


class RecordStore:
    """Stores one Scenario and one Generation per generation run.

    Both documents are written in a single Firestore batch, so a failed
    commit leaves neither behind.
    """

    def __init__(
        self,
        db: firestore.Client,
        scenarios_collection: str = "scenarios",
        generations_collection: str = "generations",
    ) -> None:
        self._db = db
        self._scenarios = scenarios_collection
        self._generations = generations_collection

    def create_generation(
        self,
        content: str,
        image_url: str,
        character_ids: list[str],
        prompt: str,
    ) -> tuple[ScenarioRecord, GenerationRecord]:
        """Persist a scenario and its generation atomically.

        Args:
            content: Raw scenario text.
            image_url: Artifact URL or placeholder URL (must be non-empty).
            character_ids: Requested ids; the first one is the primary character.
            prompt: Assembled prompt, kept as a snapshot of the character data.

        Raises:
            PersistenceError: When the batch commit fails.
        """
        now = datetime.now(timezone.utc)
        scenario = ScenarioRecord(
            id=uuid.uuid4().hex,
            content=content,
            character_id=character_ids[0] if character_ids else None,
            character_ids=list(character_ids),
            prompt=prompt,
            created_at=now,
        )
        generation = GenerationRecord(
            id=uuid.uuid4().hex,
            scenario_id=scenario.id,
            image_url=image_url,
            created_at=now,
        )

        batch = self._db.batch()
        batch.set(
            self._db.collection(self._scenarios).document(scenario.id),
            scenario.model_dump(exclude={"id"}),
        )
        batch.set(
            self._db.collection(self._generations).document(generation.id),
            generation.model_dump(exclude={"id"}),
        )
        try:
            batch.commit()
        except GoogleAPICallError as exc:
            raise PersistenceError(f"Failed to persist generation: {exc}") from exc
        logger.info(
            "Persisted generation %s for scenario %s",
            generation.id,
            scenario.id,
            extra={"generation_id": generation.id, "scenario_id": scenario.id},
        )
        return scenario, generation

    def get_scenario(self, scenario_id: str) -> Optional[ScenarioRecord]:
        doc = self._db.collection(self._scenarios).document(scenario_id).get()
        if not doc.exists:
            return None
        return ScenarioRecord(id=doc.id, **_fields(doc))

    def list_recent(self, limit: int = 10) -> list[GenerationHistoryItem]:
        """Return the newest generations first, each joined with its scenario."""
        query = (
            self._db.collection(self._generations)
            .order_by("created_at", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        items: list[GenerationHistoryItem] = []
        for doc in query.stream():
            data = _fields(doc)
            items.append(
                GenerationHistoryItem(
                    id=doc.id,
                    scenario=self.get_scenario(data["scenario_id"]),
                    **data,
                )
            )
        return items


def _fields(doc: Any) -> dict[str, Any]:
    data = doc.to_dict() or {}
    data.pop("id", None)
    return data
