"""Tests for CharacterRepository and CharacterReferenceLoader."""
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import NotFound

from conftest import FakeCharacterRepository, make_character, make_firestore_doc
from webtoon_studio.models.character import CharacterCreate
from webtoon_studio.services.artifacts import ArtifactStore
from webtoon_studio.services.characters import CharacterReferenceLoader, CharacterRepository


# ---------------------------------------------------------------------------
# CharacterRepository
# ---------------------------------------------------------------------------


class TestCharacterRepository:
    """Tests for the Firestore-backed registry."""

    def _make_db_mock(self, doc: MagicMock) -> MagicMock:
        mock_db = MagicMock()
        mock_db.collection.return_value.document.return_value.get.return_value = doc
        return mock_db

    def test_get_returns_character(self) -> None:
        db = self._make_db_mock(
            make_firestore_doc("c1", {"name": "Aria", "description": "silver hair"})
        )
        character = CharacterRepository(db).get("c1")
        assert character is not None
        assert character.id == "c1"
        assert character.name == "Aria"
        assert character.image_url is None
        db.collection.assert_called_with("characters")

    def test_get_missing_returns_none(self) -> None:
        db = self._make_db_mock(make_firestore_doc("ghost-1", None, exists=False))
        assert CharacterRepository(db).get("ghost-1") is None

    def test_list_all_orders_newest_first(self) -> None:
        db = MagicMock()
        query = db.collection.return_value.order_by.return_value
        query.stream.return_value = [
            make_firestore_doc("c2", {"name": "Bram"}),
            make_firestore_doc("c1", {"name": "Aria"}),
        ]
        characters = CharacterRepository(db).list_all()
        assert [c.id for c in characters] == ["c2", "c1"]
        assert db.collection.return_value.order_by.call_args.args[0] == "created_at"

    def test_create_writes_document(self) -> None:
        db = MagicMock()
        ref = db.collection.return_value.document.return_value
        ref.id = "new-id"
        character = CharacterRepository(db).create(
            CharacterCreate(name="Aria", description="silver hair", image_url="/uploads/a.png")
        )
        assert character.id == "new-id"
        written = ref.set.call_args.args[0]
        assert written["name"] == "Aria"
        assert written["image_url"] == "/uploads/a.png"
        assert "created_at" in written

    def test_update_unknown_returns_none(self) -> None:
        db = MagicMock()
        db.collection.return_value.document.return_value.update.side_effect = NotFound("gone")
        assert CharacterRepository(db).update("x", CharacterCreate(name="A")) is None

    def test_update_returns_refreshed_character(self) -> None:
        db = self._make_db_mock(make_firestore_doc("c1", {"name": "Aria v2"}))
        character = CharacterRepository(db).update("c1", CharacterCreate(name="Aria v2"))
        assert character is not None
        assert character.name == "Aria v2"

    def test_delete_existing(self) -> None:
        db = self._make_db_mock(make_firestore_doc("c1", {"name": "Aria"}))
        assert CharacterRepository(db).delete("c1") is True
        db.collection.return_value.document.return_value.delete.assert_called_once()

    def test_delete_unknown(self) -> None:
        db = self._make_db_mock(make_firestore_doc("c1", None, exists=False))
        assert CharacterRepository(db).delete("c1") is False
        db.collection.return_value.document.return_value.delete.assert_not_called()


# ---------------------------------------------------------------------------
# CharacterReferenceLoader
# ---------------------------------------------------------------------------


@pytest.fixture
def artifacts(tmp_path: Path) -> ArtifactStore:
    return ArtifactStore(tmp_path / "uploads", "/uploads")


class TestCharacterReferenceLoader:
    def test_empty_list(self, artifacts: ArtifactStore) -> None:
        context = CharacterReferenceLoader(FakeCharacterRepository(), artifacts).load([])
        assert context.characters == []
        assert context.images == []

    def test_unknown_ids_skipped(self, artifacts: ArtifactStore) -> None:
        repo = FakeCharacterRepository([make_character("c1")])
        context = CharacterReferenceLoader(repo, artifacts).load(["c1", "ghost-1"])
        assert [c.id for c in context.characters] == ["c1"]

    def test_all_unknown_behaves_like_empty(self, artifacts: ArtifactStore) -> None:
        context = CharacterReferenceLoader(FakeCharacterRepository(), artifacts).load(
            ["ghost-1", "ghost-2"]
        )
        assert context.characters == []
        assert context.images == []

    def test_order_preserved(self, artifacts: ArtifactStore) -> None:
        repo = FakeCharacterRepository(
            [make_character("c1", "Aria"), make_character("c2", "Bram")]
        )
        context = CharacterReferenceLoader(repo, artifacts).load(["c2", "c1"])
        assert [c.name for c in context.characters] == ["Bram", "Aria"]

    def test_duplicates_processed_independently(self, artifacts: ArtifactStore) -> None:
        url = artifacts.save(b"aria-png")
        repo = FakeCharacterRepository([make_character("c1", image_url=url)])
        context = CharacterReferenceLoader(repo, artifacts).load(["c1", "c1"])
        assert len(context.characters) == 2
        assert [i.data for i in context.images] == [b"aria-png", b"aria-png"]
        assert repo.lookups == ["c1", "c1"]

    def test_reference_image_loaded_with_media_type(self, artifacts: ArtifactStore) -> None:
        url = artifacts.save(b"jpeg-bytes", "image/jpeg")
        repo = FakeCharacterRepository([make_character("c1", image_url=url)])
        context = CharacterReferenceLoader(repo, artifacts).load(["c1"])
        assert len(context.images) == 1
        assert context.images[0].data == b"jpeg-bytes"
        assert context.images[0].mime_type == "image/jpeg"

    def test_character_without_image_contributes_text_only(
        self, artifacts: ArtifactStore
    ) -> None:
        repo = FakeCharacterRepository([make_character("c1")])
        context = CharacterReferenceLoader(repo, artifacts).load(["c1"])
        assert len(context.characters) == 1
        assert context.images == []

    def test_missing_image_file_logged_and_skipped(
        self, artifacts: ArtifactStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        repo = FakeCharacterRepository(
            [make_character("c1", image_url="/uploads/deleted.png")]
        )
        with caplog.at_level(logging.WARNING):
            context = CharacterReferenceLoader(repo, artifacts).load(["c1"])
        assert [c.name for c in context.characters] == ["Aria"]
        assert context.images == []
        assert any("c1" in r.getMessage() for r in caplog.records)

    def test_remote_image_url_skipped(self, artifacts: ArtifactStore) -> None:
        repo = FakeCharacterRepository(
            [make_character("c1", image_url="https://cdn.example.com/aria.png")]
        )
        context = CharacterReferenceLoader(repo, artifacts).load(["c1"])
        assert len(context.characters) == 1
        assert context.images == []

    def test_unreadable_image_does_not_drop_other_images(
        self, artifacts: ArtifactStore
    ) -> None:
        good = artifacts.save(b"bram-png")
        repo = FakeCharacterRepository(
            [
                make_character("c1", "Aria", image_url="/uploads/missing.png"),
                make_character("c2", "Bram", image_url=good),
            ]
        )
        context = CharacterReferenceLoader(repo, artifacts).load(["c1", "c2"])
        assert [c.name for c in context.characters] == ["Aria", "Bram"]
        assert [i.data for i in context.images] == [b"bram-png"]
