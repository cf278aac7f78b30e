import random

from conftest import PinnedRandom, make_template
from narrator.composer import NarrativeComposer
from narrator.data_loader import BiomeTemplateData, VocabularyStore
from world.chunk import Chunk

LUSH_FOREST = Chunk(terrain="forest", moisture=85, light_level=60, description="A stored description.")


def test_short_narrative_has_one_or_two_sentences(t, vocabulary):
    for seed in range(50):
        composer = NarrativeComposer(vocabulary, random.Random(seed))
        sentences = composer.compose_sentences(LUSH_FOREST, "short", t, "en")
        assert 1 <= len(sentences) <= 2


def test_long_narrative_has_four_to_seven_sentences(t, vocabulary):
    for seed in range(50):
        composer = NarrativeComposer(vocabulary, random.Random(seed))
        sentences = composer.compose_sentences(LUSH_FOREST, "long", t, "en")
        assert 4 <= len(sentences) <= 7


def test_at_most_one_opening(t, vocabulary):
    composer = NarrativeComposer(vocabulary, PinnedRandom(0.99, pick_max=True))
    sentences = composer.compose_sentences(LUSH_FOREST, "detailed", t, "en")
    openings = [s for s in sentences if s in ("You enter a verdant forest.", "Trees of oak surround you.")]
    assert len(openings) == 1
    assert sentences[0] in openings


def test_templates_not_reused(t, vocabulary):
    # random() = 0.99 never triggers synthesis while templates are plentiful
    composer = NarrativeComposer(vocabulary, PinnedRandom(0.99, pick_max=True))
    sentences = composer.compose_sentences(LUSH_FOREST, "long", t, "en")
    assert len(sentences) == 7
    assert len(set(sentences[:6])) == 6


def test_sparse_pool_is_synthesized(t, keywords):
    biome = BiomeTemplateData.model_validate({
        "terrain": "forest",
        "description_templates": [make_template("only", "SensoryDetail", [], "Only sentence.")],
        "features": {"tree": ["oak"]},
    })
    composer = NarrativeComposer(VocabularyStore(biomes={"forest": biome}, keywords={"en": keywords}), PinnedRandom(0.99))
    sentences = composer.compose_sentences(LUSH_FOREST, "short", t, "en")
    assert sentences == ["You notice oak; it is damp."]


def test_mood_fallback_to_unconditional_templates(t, keywords):
    biome = BiomeTemplateData.model_validate({
        "terrain": "forest",
        "description_templates": [
            make_template("harsh", "Opening", ["Harsh"], "Harsh opening."),
            make_template("any", "Opening", [], "Any opening."),
        ],
    })
    composer = NarrativeComposer(VocabularyStore(biomes={"forest": biome}, keywords={"en": keywords}), PinnedRandom())
    candidates = composer.candidate_templates(biome, LUSH_FOREST)
    assert [tmpl.id for tmpl in candidates] == ["any"]


def test_conditions_filter_candidates(t, keywords):
    biome = BiomeTemplateData.model_validate({
        "terrain": "forest",
        "description_templates": [
            make_template("dark_only", "Opening", ["Lush"], conditions={"lightLevel": {"max": 10}}),
            make_template("lit", "Opening", ["Lush"]),
        ],
    })
    composer = NarrativeComposer(VocabularyStore(biomes={"forest": biome}), PinnedRandom())
    assert [tmpl.id for tmpl in composer.candidate_templates(biome, LUSH_FOREST)] == ["lit"]


def test_missing_biome_uses_stored_description(t, vocabulary):
    composer = NarrativeComposer(vocabulary, PinnedRandom())
    assert composer.compose(LUSH_FOREST.model_copy(update={"terrain": "moon"}), "short", t, "en") == "A stored description."
    bare = Chunk(terrain="moon")
    assert composer.compose(bare, "short", t, "en") == "unknownAreaFallback"


def test_no_candidates_uses_stored_description(t, keywords):
    biome = BiomeTemplateData.model_validate({
        "terrain": "forest",
        "description_templates": [make_template("harsh", "Opening", ["Harsh"])],
    })
    composer = NarrativeComposer(VocabularyStore(biomes={"forest": biome}, keywords={"en": keywords}), PinnedRandom())
    assert composer.compose(LUSH_FOREST, "medium", t, "en") == "A stored description."


def test_compose_joins_sentences(t, vocabulary):
    composer = NarrativeComposer(vocabulary, random.Random(7))
    text = composer.compose(LUSH_FOREST, "medium", t, "en")
    assert text
    assert text.endswith((".", "!", "?"))


def test_empty_synthesis_is_not_counted(t):
    biome = BiomeTemplateData.model_validate({
        "terrain": "forest",
        "description_templates": [make_template("calm", "SensoryDetail", [], "The air is still.")],
    })
    composer = NarrativeComposer(VocabularyStore(biomes={"forest": biome}), PinnedRandom(pick_max=True))
    neutral = Chunk(terrain="forest")
    assert composer.compose_sentences(neutral, "short", t, "en") == ["The air is still."]
    assert composer.compose(neutral, "short", t, "en") == "The air is still."


def test_blank_narration_falls_back(t):
    biome = BiomeTemplateData.model_validate({
        "terrain": "forest",
        "description_templates": [make_template("blank", "Opening", [], "{{nothing}}")],
    })
    composer = NarrativeComposer(VocabularyStore(biomes={"forest": biome}), PinnedRandom())
    assert composer.compose_sentences(Chunk(terrain="forest"), "short", t, "en") == []
    assert composer.compose(Chunk(terrain="forest"), "short", t, "en") == "unknownAreaFallback"
    stored = Chunk(terrain="forest", description="A quiet clearing.")
    assert composer.compose(stored, "short", t, "en") == "A quiet clearing."
