"""Character registry (Firestore) and character reference loading."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from google.api_core.exceptions import NotFound
from google.cloud import firestore

from webtoon_studio.models.character import (
    Character,
    CharacterContext,
    CharacterCreate,
    ImagePart,
    ResolvedCharacter,
)
from webtoon_studio.services.artifacts import ArtifactStore

logger = logging.getLogger(__name__)


def _to_character(doc_id: str, data: dict[str, Any]) -> Character:
    return Character(
        id=doc_id,
        name=data.get("name", ""),
        description=data.get("description") or "",
        image_url=data.get("image_url"),
        created_at=data.get("created_at") or datetime.now(timezone.utc),
    )


class CharacterRepository:
    """CRUD access to the ``characters`` Firestore collection."""

    def __init__(self, db: firestore.Client, collection: str = "characters") -> None:
        self._db = db
        self._collection = collection

    def _ref(self, character_id: str) -> Any:
        return self._db.collection(self._collection).document(character_id)

    def get(self, character_id: str) -> Optional[Character]:
        """Return the character with this id, or None when it does not exist."""
        doc = self._ref(character_id).get()
        if not doc.exists:
            return None
        return _to_character(doc.id, doc.to_dict() or {})

    def list_all(self) -> list[Character]:
        """Return all characters, newest first."""
        query = self._db.collection(self._collection).order_by(
            "created_at", direction=firestore.Query.DESCENDING
        )
        return [_to_character(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    def create(self, body: CharacterCreate) -> Character:
        ref = self._db.collection(self._collection).document()
        data = {
            "name": body.name,
            "description": body.description,
            "image_url": body.image_url,
            "created_at": datetime.now(timezone.utc),
        }
        ref.set(data)
        logger.info("Created character %s (%s)", ref.id, body.name)
        return _to_character(ref.id, data)

    def update(self, character_id: str, body: CharacterCreate) -> Optional[Character]:
        """Replace name/description/image of an existing character.

        Returns:
            The updated character, or None when the id is unknown.
        """
        ref = self._ref(character_id)
        try:
            ref.update(
                {
                    "name": body.name,
                    "description": body.description,
                    "image_url": body.image_url,
                }
            )
        except NotFound:
            return None
        return self.get(character_id)

    def delete(self, character_id: str) -> bool:
        """Delete a character. Past generations keep their prompt snapshot.

        Returns:
            False when the id is unknown.
        """
        ref = self._ref(character_id)
        if not ref.get().exists:
            return False
        ref.delete()
        logger.info("Deleted character %s", character_id)
        return True


class CharacterReferenceLoader:
    """Resolves character ids to prompt text and reference image bytes."""

    def __init__(self, repository: CharacterRepository, artifacts: ArtifactStore) -> None:
        self.repository = repository
        self.artifacts = artifacts

    def load(self, character_ids: list[str]) -> CharacterContext:
        """Resolve characters in request order.

        Unknown ids are skipped. Duplicated ids are resolved once per
        occurrence. A reference image that cannot be read is logged and
        skipped; the character's text is still used.

        Args:
            character_ids: Ordered ids selected by the user (may be empty).

        Returns:
            CharacterContext with resolved characters and their image parts.
        """
        context = CharacterContext()
        for character_id in character_ids:
            character = self.repository.get(character_id)
            if character is None:
                logger.debug("Character %s not found, skipping", character_id)
                continue
            context.characters.append(
                ResolvedCharacter(
                    id=character.id,
                    name=character.name,
                    description=character.description,
                )
            )
            if character.image_url:
                image = self._read_image(character.id, character.image_url)
                if image is not None:
                    context.images.append(image)
        return context

    def _read_image(self, character_id: str, image_url: str) -> Optional[ImagePart]:
        path = self.artifacts.resolve(image_url)
        if path is None:
            logger.warning(
                "Reference image for character %s is not a stored artifact: %s",
                character_id,
                image_url,
            )
            return None
        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.warning(
                "Failed to read reference image for character %s: %s",
                character_id,
                exc,
                extra={"error_type": type(exc).__name__},
            )
            return None
        return ImagePart(data=data, mime_type=self.artifacts.guess_mime_type(path))
