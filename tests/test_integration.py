import random

import pytest

from narrator.actions import ActionNarrator
from narrator.composer import NarrativeComposer
from narrator.data_loader import DATA_DIR, VocabularyStore, get_item_definitions
from narrator.i18n import MessageCatalog
from narrator.search import SearchResolver
from world.chunk import Chunk, ChunkAction, Enemy


@pytest.fixture
def store():
    return VocabularyStore.load(DATA_DIR)


@pytest.fixture
def catalog():
    return MessageCatalog.load(DATA_DIR / "i18n", rng=random.Random(3))


@pytest.mark.parametrize("language", ["en", "vi"])
@pytest.mark.parametrize("terrain", ["forest", "jungle", "cave", "desert", "swamp", "mountain", "grassland", "tundra", "volcanic"])
def test_every_biome_composes(store, catalog, terrain, language):
    composer = NarrativeComposer(store, random.Random(terrain))
    chunk = Chunk(terrain=terrain, light_level=40, moisture=60, temperature=20, danger_level=50, game_time=720)
    text = composer.compose(chunk, "long", catalog.translator(language), language)
    assert text
    assert "{{" not in text
    assert "{light_level_detail}" not in text


def test_cave_attack_reads_naturally(catalog):
    chunk = Chunk(terrain="cave", light_level=5, enemy=Enemy(type={"en": "Cave Bat", "vi": "Dơi hang"}))
    narrator = ActionNarrator(random.Random(1), strict_sensory=True)
    text = narrator.narrate(
        "attack",
        {"successLevel": "Success", "playerDamage": 6, "enemyDamage": 2},
        chunk,
        catalog.translator("en"),
        "en",
    )
    assert text == (
        "You land a solid blow on Cave Bat. You deal 6 damage. "
        "You can barely see your own hands. Cave Bat strikes back, dealing 2 damage."
    )


def test_search_in_forest(store, catalog):
    chunk = Chunk(terrain="forest", vegetation_density=70, moisture=70, actions=[ChunkAction(id=9)])
    resolver = SearchResolver(store, get_item_definitions(DATA_DIR), random.Random(11))
    outcome = resolver.resolve(chunk, 9, "en", catalog.translator("en"), lambda r: r.min, spawn_multiplier=100)
    assert outcome.chunk.actions == []
    assert chunk.actions[0].id == 9
    if outcome.found:
        assert outcome.narrative.startswith("After searching, you find ")
        assert len(outcome.chunk.items) == 1
    else:
        assert outcome.narrative == "You search the area carefully but find nothing of interest."
