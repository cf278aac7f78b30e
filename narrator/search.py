"""
Narrator — narrator/search.py
Search Resolver: item discovery for the explore/search chunk action.
=====================================================================

Candidate pool
--------------
  natural   biome item templates whose definition exists and whose
            conditions hold for the chunk (authored chance, else 0.5)
  extra     up to EXTRA_CANDIDATES registry items with spawn_enabled = false,
            base chance NON_NATURAL_BASE_CHANCE, capped at NON_NATURAL_CAP

Extras are only added when at least one natural candidate exists. The pool is
shuffled and walked with one Bernoulli trial per candidate; the first success
is the find. The chunk is never mutated: the outcome carries a new Chunk.
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from narrator.conditions import check_conditions
from narrator.data_loader import ItemDefinition, QuantityRange, VocabularyStore
from narrator.i18n import Translator, get_translated_text
from world.chunk import Chunk, ChunkItem

logger = logging.getLogger(__name__)

# ================================================================================
# DESIGN VARIABLES
# ================================================================================

SEARCH_BOOST: float = 1.4
SOFTCAP_K: float = 0.4
DEFAULT_NATURAL_CHANCE: float = 0.5
NON_NATURAL_BASE_CHANCE: float = 0.02
NON_NATURAL_CAP: float = 0.3
MAX_CHANCE: float = 0.95
EXTRA_CANDIDATES: int = 3

# Names on chunk items are matched in this language.
MATCH_LANGUAGE: str = "en"

QuantityRoller = Callable[[QuantityRange], int]


def softcap(multiplier: float, k: float = SOFTCAP_K) -> float:
    """Diminishing returns above 1: m / (1 + (m - 1) * k)."""
    if multiplier <= 1:
        return multiplier
    return multiplier / (1 + (multiplier - 1) * k)


@dataclass(frozen=True)
class SearchCandidate:
    item_id: str
    base_chance: float
    natural: bool = True


def candidate_chance(candidate: SearchCandidate, spawn_multiplier: float = 1) -> float:
    chance = min(MAX_CHANCE, candidate.base_chance * softcap(spawn_multiplier) * SEARCH_BOOST)
    if not candidate.natural:
        chance = min(NON_NATURAL_CAP, chance)
    return chance


@dataclass(frozen=True)
class Toast:
    title: str = "exploreSuccessTitle"
    description: str = "exploreFoundItems"
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchOutcome:
    chunk: Chunk
    narrative: str
    toast: Optional[Toast] = None

    @property
    def found(self) -> bool:
        return self.toast is not None


def _normalize(name: str) -> str:
    return re.sub(r"[\s\-]+", "_", name.strip().casefold())


class SearchResolver:
    def __init__(
        self,
        vocabulary: VocabularyStore,
        item_registry: Mapping[str, ItemDefinition],
        rng: Optional[random.Random] = None,
    ):
        self.vocabulary = vocabulary
        self.item_registry = item_registry
        self.rng = rng or random

    def natural_candidates(self, chunk: Chunk) -> List[SearchCandidate]:
        biome = self.vocabulary.biome_for(chunk.terrain)
        if biome is None:
            return []
        candidates = []
        for tmpl in biome.items:
            if tmpl.name not in self.item_registry:
                logger.debug("Biome item %s has no definition; skipped", tmpl.name)
                continue
            if not check_conditions(tmpl.conditions, chunk):
                continue
            chance = DEFAULT_NATURAL_CHANCE if tmpl.chance is None else tmpl.chance
            candidates.append(SearchCandidate(tmpl.name, chance, natural=True))
        return candidates

    def extra_candidates(self) -> List[SearchCandidate]:
        hidden = sorted(item_id for item_id, item in self.item_registry.items() if not item.spawn_enabled)
        sample = self.rng.sample(hidden, min(EXTRA_CANDIDATES, len(hidden)))
        return [SearchCandidate(item_id, NON_NATURAL_BASE_CHANCE, natural=False) for item_id in sample]

    def roll(self, candidates: List[SearchCandidate], spawn_multiplier: float = 1) -> Optional[SearchCandidate]:
        """Shuffles a copy of the pool and returns the first candidate whose trial succeeds."""
        pool = list(candidates)
        self.rng.shuffle(pool)
        for candidate in pool:
            if self.rng.random() < candidate_chance(candidate, spawn_multiplier):
                return candidate
        return None

    def _stack_index(self, chunk: Chunk, item_id: str) -> Optional[int]:
        wanted = _normalize(item_id)
        for index, item in enumerate(chunk.items):
            if item.id == item_id:
                return index
            name = get_translated_text(item.name, MATCH_LANGUAGE)
            if name == item_id or _normalize(name) == wanted:
                return index
            definition = self.item_registry.get(item_id)
            if definition is not None and name == get_translated_text(definition.name, MATCH_LANGUAGE):
                return index
        return None

    def add_to_chunk(self, chunk: Chunk, item_id: str, quantity: int) -> Chunk:
        """Returns a new chunk with `quantity` of `item_id` merged into its items."""
        index = self._stack_index(chunk, item_id)
        if index is not None:
            return chunk.with_item_quantity(index, chunk.items[index].quantity + quantity)

        definition = self.item_registry[item_id]
        found = ChunkItem(
            name=definition.name,
            id=definition.id or item_id,
            description=definition.description,
            quantity=quantity,
            tier=definition.tier,
            emoji=definition.emoji,
        )
        return chunk.with_items([*chunk.items, found])

    def resolve(
        self,
        chunk: Chunk,
        action_id: int,
        language: str,
        t: Translator,
        roll_quantity: QuantityRoller,
        spawn_multiplier: float = 1,
    ) -> SearchOutcome:
        chunk = chunk.without_action(action_id)

        natural = self.natural_candidates(chunk)
        if not natural:
            return SearchOutcome(chunk, t("exploreFoundNothing"))

        chosen = self.roll(natural + self.extra_candidates(), spawn_multiplier)
        if chosen is None:
            return SearchOutcome(chunk, t("exploreFoundNothing"))

        definition = self.item_registry[chosen.item_id]
        quantity = roll_quantity(definition.base_quantity)
        chunk = self.add_to_chunk(chunk, chosen.item_id, quantity)

        items = f"{quantity} {get_translated_text(definition.name, language, t)}"
        logger.debug("Search found %s (natural=%s)", chosen.item_id, chosen.natural)
        return SearchOutcome(
            chunk,
            t("exploreFoundItemsNarrative", {"items": items}),
            Toast(params={"items": items}),
        )
