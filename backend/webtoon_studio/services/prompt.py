"""Prompt assembly for scene generation."""
from webtoon_studio.models.character import ImagePart, ResolvedCharacter
from webtoon_studio.models.generation import AssembledPrompt

CHARACTERS_HEADER = "Characters:"
SCENE_HEADER = "Scene Description:"


def build_prompt_text(scenario_text: str, characters: list[ResolvedCharacter]) -> str:
    """Combine the scenario with character descriptions.

    Without characters the scenario is returned unchanged. Otherwise the
    prompt lists each character as ``- name: description`` in the given
    order, then a ``Scene Description:`` section with the scenario verbatim.
    """
    if not characters:
        return scenario_text
    lines = [CHARACTERS_HEADER]
    lines.extend(f"- {c.name}: {c.description}" for c in characters)
    return "\n".join(lines) + f"\n\n{SCENE_HEADER}\n{scenario_text}"


def assemble_prompt(
    scenario_text: str,
    characters: list[ResolvedCharacter],
    images: list[ImagePart],
) -> AssembledPrompt:
    return AssembledPrompt(
        text=build_prompt_text(scenario_text, characters),
        images=list(images),
    )
