"""
Narrator — narrator/templates.py
Template Selector and Placeholder Filler.
=========================================

Placeholder syntaxes
--------------------
  {{keyword}}            vocabulary pool lookup (adjectives > features > smells > sounds > sky)
                         then the language's keyword phrases
  {light_level_detail}   computed, same bands as the mood analyzer
  {temp_detail}
  {moisture_detail}
  {jungle_feeling_dark}
  {enemy_name}           chunk enemy, or the "no enemy" phrase
  {item_found}           random chunk item, or the "no item" phrase
  {player_health_status} only when a player snapshot is supplied
  {player_stamina_status}
"""

from __future__ import annotations

import logging
import random
import re
from enum import StrEnum
from typing import Any, Optional, Sequence, Tuple

from narrator.data_loader import DEFAULT_TEMPLATE_WEIGHT, NarrativeTemplate, VocabularyStore
from narrator.i18n import Translator, get_translated_text
from world.chunk import Chunk, PlayerState

logger = logging.getLogger(__name__)

_KEYWORD_PATTERN = re.compile(r"\{\{(.*?)\}\}")

LOW_PLAYER_STAT: float = 30


class NarrativeLength(StrEnum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    DETAILED = "detailed"


SENTENCE_LIMITS = {
    NarrativeLength.SHORT: (1, 2),
    NarrativeLength.MEDIUM: (2, 4),
    NarrativeLength.LONG: (4, 7),
    NarrativeLength.DETAILED: (4, 7),
}


def get_sentence_limits(narrative_length: str) -> Tuple[int, int]:
    """(min, max) sentence counts for a length tier. Unknown tiers read as short."""
    try:
        return SENTENCE_LIMITS[NarrativeLength(narrative_length)]
    except ValueError:
        return SENTENCE_LIMITS[NarrativeLength.SHORT]


def select_template_by_weight(templates: Sequence[NarrativeTemplate], rng=random) -> NarrativeTemplate:
    """Weighted random draw. An empty list is a caller bug and raises."""
    if not templates:
        raise ValueError("No templates provided for weighted selection.")

    total = sum(t.weight or DEFAULT_TEMPLATE_WEIGHT for t in templates)
    remainder = rng.random() * total
    for tmpl in templates:
        remainder -= tmpl.weight or DEFAULT_TEMPLATE_WEIGHT
        if remainder <= 0:
            return tmpl
    return templates[0]


# ================================================================================
# COMPUTED PLACEHOLDERS
# ================================================================================

def light_level_detail(chunk: Chunk, t: Translator) -> str:
    if chunk.light_level <= 10:
        return t("light_level_dark")
    if chunk.light_level < 50:
        return t("light_level_dim")
    return t("light_level_normal")


def temp_detail(chunk: Chunk, t: Translator) -> str:
    if chunk.temperature is not None:
        if chunk.temperature <= 0:
            return t("temp_cold")
        if chunk.temperature >= 40:
            return t("temp_hot")
    return t("temp_mild")


def moisture_detail(chunk: Chunk, t: Translator) -> str:
    if chunk.moisture >= 80:
        return t("moisture_humid")
    if chunk.moisture <= 20:
        return t("moisture_dry")
    return t("moisture_normal")


def _enemy_name(chunk: Chunk, t: Translator, language: str) -> str:
    if chunk.enemy is not None and chunk.enemy.type:
        return get_translated_text(chunk.enemy.type, language, t)
    return t("no_enemy_found")


def _item_found(chunk: Chunk, t: Translator, language: str, rng) -> str:
    if chunk.items:
        return get_translated_text(rng.choice(chunk.items).name, language, t)
    return t("no_item_found")


def fill_template(
    template_string: str,
    chunk: Chunk,
    world: Any,
    player_position: Optional[Tuple[int, int]],
    t: Translator,
    language: str,
    player_state: Optional[PlayerState] = None,
    vocabulary: Optional[VocabularyStore] = None,
    rng=random,
) -> str:
    """Substitutes both placeholder kinds. Never raises for missing vocabulary."""
    vocabulary = vocabulary or VocabularyStore()
    biome = vocabulary.biome_for(chunk.terrain)
    if biome is None:
        logger.warning("Placeholder data not found for %s", chunk.terrain)
        return template_string

    phrases = vocabulary.keyword_variations(language).phrases

    def vocabulary_entry(match: re.Match) -> str:
        keyword = match.group(1).strip()
        pool = biome.pool(keyword) or phrases.get(keyword)
        if pool:
            return rng.choice(pool)
        logger.warning("Placeholder category not found or empty: %s", keyword)
        return ""

    filled = _KEYWORD_PATTERN.sub(vocabulary_entry, template_string)

    computed = {
        "{light_level_detail}": lambda: light_level_detail(chunk, t),
        "{temp_detail}": lambda: temp_detail(chunk, t),
        "{moisture_detail}": lambda: moisture_detail(chunk, t),
        "{jungle_feeling_dark}": lambda: t("jungle_feeling_dark_phrase"),
        "{enemy_name}": lambda: _enemy_name(chunk, t, language),
        "{item_found}": lambda: _item_found(chunk, t, language, rng),
    }
    if player_state is not None:
        computed["{player_health_status}"] = lambda: (
            t("player_health_low") if player_state.hp < LOW_PLAYER_STAT else t("player_health_normal")
        )
        computed["{player_stamina_status}"] = lambda: (
            t("player_stamina_low") if player_state.stamina < LOW_PLAYER_STAT else t("player_stamina_normal")
        )

    for marker, resolve in computed.items():
        if marker in filled:
            filled = filled.replace(marker, resolve())
    return filled
