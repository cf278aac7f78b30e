"""
Narrator — narrator/mood.py
Mood Analyzer: chunk attributes -> set of qualitative mood tags.
================================================================

Eight attribute groups are read independently and their contributions
unioned. The band boundaries below are the ones templates are authored
against; they are business rules, not tuning knobs.

  danger      >=70 Danger Foreboding Threatening | >=40 Threatening
  light       <=10 Dark Gloomy Mysterious | <50 Mysterious Gloomy | >=80 Vibrant Peaceful
  moisture    >=80 Lush Wet Vibrant | <=20 Arid Desolate
  predators   >=60 Danger Wild
  magic       >=70 Magic Mysterious Ethereal | >=40 Mysterious
  humans      >=60 Civilized Historic | >0 Abandoned
  temperature >=40 Hot Harsh | <=0 Cold Harsh | 15<t<30 Peaceful (skipped when unknown)
  terrain     fixed tag set per terrain (TERRAIN_MOODS)
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Dict, FrozenSet, Iterable, Tuple

from world.chunk import Chunk


class MoodTag(StrEnum):
    DANGER = "Danger"
    FOREBODING = "Foreboding"
    THREATENING = "Threatening"
    DARK = "Dark"
    GLOOMY = "Gloomy"
    MYSTERIOUS = "Mysterious"
    VIBRANT = "Vibrant"
    PEACEFUL = "Peaceful"
    LUSH = "Lush"
    WET = "Wet"
    ARID = "Arid"
    DESOLATE = "Desolate"
    WILD = "Wild"
    MAGIC = "Magic"
    ETHEREAL = "Ethereal"
    CIVILIZED = "Civilized"
    HISTORIC = "Historic"
    ABANDONED = "Abandoned"
    HOT = "Hot"
    COLD = "Cold"
    HARSH = "Harsh"
    RUGGED = "Rugged"
    ELEVATED = "Elevated"
    CONFINED = "Confined"
    SMOLDERING = "Smoldering"
    SERENE = "Serene"
    VAST = "Vast"
    STRUCTURED = "Structured"
    BARREN = "Barren"


M = MoodTag

TERRAIN_MOODS: Dict[str, Tuple[MoodTag, ...]] = {
    "swamp": (M.GLOOMY, M.WET, M.MYSTERIOUS),
    "desert": (M.ARID, M.DESOLATE, M.HARSH),
    "mountain": (M.HARSH, M.RUGGED, M.ELEVATED),
    "forest": (M.LUSH, M.PEACEFUL),
    "cave": (M.DARK, M.MYSTERIOUS, M.FOREBODING, M.CONFINED),
    "jungle": (M.LUSH, M.VIBRANT, M.MYSTERIOUS, M.WILD),
    "volcanic": (M.DANGER, M.HARSH, M.SMOLDERING),
    "ocean": (M.SERENE, M.MYSTERIOUS, M.VAST),
    "underwater": (M.SERENE, M.MYSTERIOUS, M.VAST),
    "city": (M.CIVILIZED, M.STRUCTURED),
    "space_station": (M.CIVILIZED, M.STRUCTURED),
    "tundra": (M.COLD, M.DESOLATE, M.BARREN),
}


def _danger_moods(level: float) -> Tuple[MoodTag, ...]:
    if level >= 70:
        return (M.DANGER, M.FOREBODING, M.THREATENING)
    if level >= 40:
        return (M.THREATENING,)
    return ()


def _light_moods(level: float) -> Tuple[MoodTag, ...]:
    if level <= 10:
        return (M.DARK, M.GLOOMY, M.MYSTERIOUS)
    if level < 50:
        return (M.MYSTERIOUS, M.GLOOMY)
    if level >= 80:
        return (M.VIBRANT, M.PEACEFUL)
    return ()


def _moisture_moods(level: float) -> Tuple[MoodTag, ...]:
    if level >= 80:
        return (M.LUSH, M.WET, M.VIBRANT)
    if level <= 20:
        return (M.ARID, M.DESOLATE)
    return ()


def _predator_moods(level: float) -> Tuple[MoodTag, ...]:
    return (M.DANGER, M.WILD) if level >= 60 else ()


def _magic_moods(level: float) -> Tuple[MoodTag, ...]:
    if level >= 70:
        return (M.MAGIC, M.MYSTERIOUS, M.ETHEREAL)
    if level >= 40:
        return (M.MYSTERIOUS,)
    return ()


def _human_moods(level: float) -> Tuple[MoodTag, ...]:
    if level >= 60:
        return (M.CIVILIZED, M.HISTORIC)
    if level > 0:
        return (M.ABANDONED,)
    return ()


def _temperature_moods(temp) -> Tuple[MoodTag, ...]:
    if temp is None or not math.isfinite(temp):
        return ()
    if temp >= 40:
        return (M.HOT, M.HARSH)
    if temp <= 0:
        return (M.COLD, M.HARSH)
    if 15 < temp < 30:
        return (M.PEACEFUL,)
    return ()


def analyze_chunk_mood(chunk: Chunk) -> FrozenSet[MoodTag]:
    """Derives the chunk's mood. Pure; recompute whenever it is needed."""
    moods = set()
    moods.update(_danger_moods(chunk.danger_level))
    moods.update(_light_moods(chunk.light_level))
    moods.update(_moisture_moods(chunk.moisture))
    moods.update(_predator_moods(chunk.predator_presence))
    moods.update(_magic_moods(chunk.magic_affinity))
    moods.update(_human_moods(chunk.human_presence))
    moods.update(_temperature_moods(chunk.temperature))
    moods.update(TERRAIN_MOODS.get(chunk.terrain.lower(), ()))
    return frozenset(moods)


def has_mood_overlap(template_moods: Iterable[MoodTag], current_moods: Iterable[MoodTag]) -> bool:
    """An empty template mood list matches everything; otherwise one shared tag is enough."""
    template_moods = set(template_moods or ())
    if not template_moods:
        return True
    return not template_moods.isdisjoint(current_moods or ())
