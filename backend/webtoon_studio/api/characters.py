"""Character registry API router."""
from fastapi import APIRouter, Depends, HTTPException, Request

from webtoon_studio.models.character import Character, CharacterCreate
from webtoon_studio.services.characters import CharacterRepository

router = APIRouter(prefix="/api/characters", tags=["characters"])


def get_character_repository(request: Request) -> CharacterRepository:
    repo: CharacterRepository | None = getattr(request.app.state, "character_repository", None)
    if repo is None:
        raise HTTPException(status_code=503, detail="Character registry unavailable.")
    return repo


@router.get("", response_model=list[Character])
async def list_characters(
    repo: CharacterRepository = Depends(get_character_repository),
) -> list[Character]:
    """List characters, newest first."""
    return repo.list_all()


@router.post("", response_model=Character)
async def create_character(
    body: CharacterCreate,
    repo: CharacterRepository = Depends(get_character_repository),
) -> Character:
    return repo.create(body)


@router.put("/{character_id}", response_model=Character)
async def update_character(
    character_id: str,
    body: CharacterCreate,
    repo: CharacterRepository = Depends(get_character_repository),
) -> Character:
    character = repo.update(character_id, body)
    if character is None:
        raise HTTPException(status_code=404, detail="Character not found")
    return character


@router.delete("/{character_id}")
async def delete_character(
    character_id: str,
    repo: CharacterRepository = Depends(get_character_repository),
) -> dict:
    """Delete a character. Existing generations are not affected."""
    if not repo.delete(character_id):
        raise HTTPException(status_code=404, detail="Character not found")
    return {"success": True}
