"""Shared test fixtures and configuration."""
from datetime import datetime, timezone
from typing import Optional
from unittest.mock import MagicMock

import pytest

from webtoon_studio.models.character import Character
from webtoon_studio.models.generation import GenerationRecord, ScenarioRecord


@pytest.fixture(autouse=True)
def set_required_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test without a Gemini key and without placeholder delay."""
    monkeypatch.setenv("GOOGLE_GENERATIVE_AI_API_KEY", "")
    monkeypatch.setenv("PLACEHOLDER_DELAY_SECONDS", "0")
    monkeypatch.setenv("GCP_PROJECT_ID", "test-project")


class FakeCharacterRepository:
    """In-memory stand-in for CharacterRepository."""

    def __init__(self, characters: Optional[list[Character]] = None) -> None:
        self.characters = {c.id: c for c in characters or []}
        self.lookups: list[str] = []

    def get(self, character_id: str) -> Optional[Character]:
        self.lookups.append(character_id)
        return self.characters.get(character_id)


class FakeRecordStore:
    """In-memory stand-in for RecordStore."""

    def __init__(self, fail_with: Optional[Exception] = None) -> None:
        self.scenarios: list[ScenarioRecord] = []
        self.generations: list[GenerationRecord] = []
        self.fail_with = fail_with

    def create_generation(
        self,
        content: str,
        image_url: str,
        character_ids: list[str],
        prompt: str,
    ) -> tuple[ScenarioRecord, GenerationRecord]:
        if self.fail_with is not None:
            raise self.fail_with
        now = datetime.now(timezone.utc)
        scenario = ScenarioRecord(
            id=f"scn-{len(self.scenarios) + 1}",
            content=content,
            character_id=character_ids[0] if character_ids else None,
            character_ids=character_ids,
            prompt=prompt,
            created_at=now,
        )
        generation = GenerationRecord(
            id=f"gen-{len(self.generations) + 1}",
            scenario_id=scenario.id,
            image_url=image_url,
            created_at=now,
        )
        self.scenarios.append(scenario)
        self.generations.append(generation)
        return scenario, generation

    def list_recent(self, limit: int = 10) -> list:
        return list(reversed(self.generations))[:limit]


def make_character(
    character_id: str = "char-1",
    name: str = "Aria",
    description: str = "silver hair, red coat",
    image_url: Optional[str] = None,
) -> Character:
    return Character(
        id=character_id,
        name=name,
        description=description,
        image_url=image_url,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


def make_firestore_doc(doc_id: str, data: Optional[dict], exists: bool = True) -> MagicMock:
    """Build a Firestore DocumentSnapshot mock."""
    doc = MagicMock()
    doc.id = doc_id
    doc.exists = exists
    doc.to_dict.return_value = data
    return doc
