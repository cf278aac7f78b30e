"""
Narrator — narrator/synthesis.py
Detail Synthesizer: fallback sentences built straight from chunk attributes.
===========================================================================

Used by the composer when the detail template pool runs thin, and at random
to vary the prose. The most prominent of temperature / moisture / light
picks the adjective; the biome's feature vocabulary (else the enemy, else
the first item) supplies the noun phrase; a language pattern joins them.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from narrator.data_loader import BiomeTemplateData, KeywordVariations
from narrator.i18n import Translator, get_translated_text
from world.chunk import Chunk

logger = logging.getLogger(__name__)

# Prominence bonuses for values sitting in an extreme band.
TEMPERATURE_EXTREME_BONUS: float = 20
MOISTURE_EXTREME_BONUS: float = 15
LIGHT_EXTREME_BONUS: float = 10
NEUTRAL_MIDPOINT: float = 50


def prominence_scores(chunk: Chunk) -> List[Tuple[str, float]]:
    """Scores each attribute by distance from neutral, most prominent first."""
    scores = []
    if chunk.temperature is not None:
        temp = chunk.temperature
        bonus = TEMPERATURE_EXTREME_BONUS if temp >= 80 or temp <= 10 else 0
        scores.append(("temperature", abs(temp - NEUTRAL_MIDPOINT) + bonus))

    m = chunk.moisture
    bonus = MOISTURE_EXTREME_BONUS if m >= 80 or m <= 20 else 0
    scores.append(("moisture", abs(m - NEUTRAL_MIDPOINT) + bonus))

    light = chunk.light_level
    distance = -light if light <= 0 else 100 - light
    bonus = LIGHT_EXTREME_BONUS if light <= 10 else 0
    scores.append(("light", abs(distance) + bonus))

    # sorted() is stable, so ties keep the temperature > moisture > light order.
    return sorted(scores, key=lambda item: item[1], reverse=True)


def _band(primary: str, chunk: Chunk) -> Tuple[str, str]:
    if primary == "temperature":
        temp = chunk.temperature
        return "temp_adj", "hot" if temp >= 80 else "cold" if temp <= 10 else "mild"
    if primary == "moisture":
        m = chunk.moisture
        return "moisture_adj", "high" if m >= 80 else "low" if m <= 20 else "medium"
    light = chunk.light_level
    return "light_adj", "dark" if light <= 10 else "medium" if light <= 40 else "bright"


def _pick(rng, entries) -> str:
    return rng.choice(entries) if entries else ""


def _feature(chunk: Chunk, biome: Optional[BiomeTemplateData], language: str, t: Translator, rng) -> str:
    if biome is not None:
        pool = biome.first_feature_pool()
        if pool:
            return rng.choice(pool)
    if chunk.enemy is not None and chunk.enemy.type:
        return get_translated_text(chunk.enemy.type, language, t)
    if chunk.items:
        return get_translated_text(chunk.items[0].name, language, t)
    return ""


def _capitalize(sentence: str) -> str:
    sentence = sentence.strip()
    return sentence[:1].upper() + sentence[1:]


def fallback_phrase(chunk: Chunk, t: Translator) -> str:
    if chunk.temperature is not None and chunk.temperature >= 80:
        return t("temp_hot")
    if chunk.light_level <= 10:
        return t("light_level_dark")
    return ""


def synthesize_detail_sentence(
    chunk: Chunk,
    language: str,
    t: Translator,
    biome: Optional[BiomeTemplateData],
    keywords: KeywordVariations,
    rng=random,
) -> str:
    """Composes one sentence from raw attributes. Degrades to a minimal phrase instead of raising."""
    try:
        primary = prominence_scores(chunk)[0][0]
        table_name, band = _band(primary, chunk)
        adj = _pick(rng, getattr(keywords, table_name).get(band, ()))
        if not adj:
            logger.debug("No %s adjectives for band %s", table_name, band)
            return fallback_phrase(chunk, t)
        feature = _feature(chunk, biome, language, t, rng) or _pick(rng, keywords.feature_fallback)
        pattern = rng.choice(keywords.sentence_patterns)
        return _capitalize(pattern.format(adj=adj, feature=feature))
    except Exception:  # noqa: BLE001
        logger.warning("Detail synthesis failed for %s chunk", chunk.terrain, exc_info=True)
        return fallback_phrase(chunk, t)
