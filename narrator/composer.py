"""
Narrator — narrator/composer.py
Narrative Composer: ambient chunk description without a language model.
=======================================================================

Pipeline
--------
  1. Mood from chunk attributes (narrator/mood.py)
  2. Biome templates filtered by mood overlap and conditions
     (fallback: templates with an explicitly empty mood list)
  3. Target sentence count drawn from the length tier
  4. At most one Opening, then detail templates without reuse,
     interleaved with synthesized sentences
  5. Smart join (narrator/text.py)
"""

from __future__ import annotations

import logging
import random
from typing import Any, List, Optional, Tuple

from narrator.conditions import check_conditions
from narrator.data_loader import BiomeTemplateData, NarrativeTemplate, TemplateType, VocabularyStore
from narrator.i18n import Translator
from narrator.mood import analyze_chunk_mood, has_mood_overlap
from narrator.synthesis import synthesize_detail_sentence
from narrator.templates import fill_template, get_sentence_limits, select_template_by_weight
from narrator.text import smart_join_sentences
from world.chunk import Chunk, PlayerState

logger = logging.getLogger(__name__)

# Below this many detail templates every slot is synthesized.
SPARSE_TEMPLATE_THRESHOLD: int = 3
# Chance per slot of synthesizing even when templates remain.
SYNTHESIS_PROBABILITY: float = 0.4

DETAIL_TYPES = (TemplateType.ENVIRONMENT_DETAIL, TemplateType.SENSORY_DETAIL)


class NarrativeComposer:
    def __init__(self, vocabulary: VocabularyStore, rng: Optional[random.Random] = None):
        self.vocabulary = vocabulary
        self.rng = rng or random

    def candidate_templates(
        self,
        biome: BiomeTemplateData,
        chunk: Chunk,
        player_state: Optional[PlayerState] = None,
    ) -> List[NarrativeTemplate]:
        moods = analyze_chunk_mood(chunk)
        templates = list(biome.description_templates)
        candidates = [
            tmpl for tmpl in templates
            if has_mood_overlap(tmpl.mood, moods) and check_conditions(tmpl.conditions, chunk, player_state)
        ]
        if not candidates:
            candidates = [tmpl for tmpl in templates if not tmpl.mood]
        return candidates

    def compose_sentences(
        self,
        chunk: Chunk,
        narrative_length: str,
        t: Translator,
        language: str,
        player_state: Optional[PlayerState] = None,
        world: Any = None,
        player_position: Optional[Tuple[int, int]] = None,
    ) -> Optional[List[str]]:
        """Returns the sentences before joining, or None when no template applies."""
        biome = self.vocabulary.biome_for(chunk.terrain)
        if biome is None:
            logger.warning("No biome template data found for: %s", chunk.terrain)
            return None

        candidates = self.candidate_templates(biome, chunk, player_state)
        if not candidates:
            return None

        min_s, max_s = get_sentence_limits(narrative_length)
        target = self.rng.randint(min_s, max_s)
        keywords = self.vocabulary.keyword_variations(language)

        def fill(tmpl: NarrativeTemplate) -> str:
            return fill_template(
                tmpl.template, chunk, world, player_position, t, language,
                player_state, vocabulary=self.vocabulary, rng=self.rng,
            )

        sentences: List[str] = []
        openings = [tmpl for tmpl in candidates if tmpl.type == TemplateType.OPENING]
        if openings:
            sentences.append(fill(select_template_by_weight(openings, self.rng)))

        details = [tmpl for tmpl in candidates if tmpl.type in DETAIL_TYPES]
        while len(sentences) < target and details:
            if len(details) < SPARSE_TEMPLATE_THRESHOLD or self.rng.random() < SYNTHESIS_PROBABILITY:
                synthesized = synthesize_detail_sentence(chunk, language, t, biome, keywords, self.rng)
                if synthesized:
                    sentences.append(synthesized)
                    continue
            # Empty synthesis falls through to a template.
            chosen = select_template_by_weight(details, self.rng)
            sentences.append(fill(chosen))
            details.remove(chosen)

        return [sentence for sentence in sentences if sentence.strip()]

    def compose(
        self,
        chunk: Chunk,
        narrative_length: str,
        t: Translator,
        language: str,
        player_state: Optional[PlayerState] = None,
        world: Any = None,
        player_position: Optional[Tuple[int, int]] = None,
    ) -> str:
        sentences = self.compose_sentences(chunk, narrative_length, t, language, player_state, world, player_position)
        text = smart_join_sentences(sentences, narrative_length, language, self.rng) if sentences else ""
        return text or chunk.description or t("unknownAreaFallback")
