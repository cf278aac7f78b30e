import random

import pytest

from narrator.data_loader import BiomeTemplateData, KeywordVariations, VocabularyStore, clear_caches


class KeyTranslator:
    """Returns the key itself, with replacements appended as key[a=1,b=2]. Records every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, key, replacements=None):
        self.calls.append((key, dict(replacements or {})))
        if not replacements:
            return key
        params = ",".join(f"{k}={v}" for k, v in replacements.items())
        return f"{key}[{params}]"

    def keys(self):
        return [key for key, _ in self.calls]


class PinnedRandom(random.Random):
    """Deterministic stand-in: first choice, lowest randint, fixed random(), no shuffling."""

    def __init__(self, value=0.0, pick_max=False):
        super().__init__(0)
        self.value = value
        self.pick_max = pick_max

    def random(self):
        return self.value

    def choice(self, seq):
        return seq[0]

    def randint(self, a, b):
        return b if self.pick_max else a

    def shuffle(self, x):
        return None

    def sample(self, population, k):
        return list(population)[:k]


@pytest.fixture
def t():
    return KeyTranslator()


@pytest.fixture(autouse=True)
def _fresh_caches():
    clear_caches()
    yield
    clear_caches()


def make_template(id, type="EnvironmentDetail", mood=(), template=None, weight=0.5, conditions=None):
    return {
        "id": id,
        "type": type,
        "mood": list(mood),
        "weight": weight,
        "conditions": conditions or {},
        "template": template or f"{id} sentence.",
    }


@pytest.fixture
def forest_biome():
    return BiomeTemplateData.model_validate({
        "terrain": "forest",
        "description_templates": [
            make_template("open_a", "Opening", ["Lush"], "You enter a {{adj_lush}} forest."),
            make_template("open_b", "Opening", ["Lush"], "Trees of {{tree}} surround you."),
            make_template("env_1", "EnvironmentDetail", ["Lush"], "The {{tree}} trees sway."),
            make_template("env_2", "EnvironmentDetail", ["Peaceful"], "The light is {light_level_detail}."),
            make_template("env_3", "EnvironmentDetail", ["Lush"], "Moss covers the ground."),
            make_template("sen_1", "SensoryDetail", ["Lush"], "You smell {{smell}}."),
            make_template("sen_2", "SensoryDetail", ["Peaceful"], "The air feels {temp_detail}."),
            make_template("sen_3", "SensoryDetail", ["Lush"], "Birds sing nearby."),
            make_template("sen_4", "SensoryDetail", ["Peaceful"], "A breeze passes."),
            make_template("closing", "Closing", ["Peaceful"], "You feel calm."),
        ],
        "adjectives": {"adj_lush": ["verdant"]},
        "features": {"tree": ["oak"]},
        "smells": {"smell": ["pine resin"]},
        "items": [
            {"name": "wild_berries", "chance": 0.5},
            {"name": "healing_herb", "chance": 0.5, "conditions": {"moisture": {"min": 90}}},
        ],
    })


@pytest.fixture
def keywords():
    return KeywordVariations(
        temp_adj={"hot": ("scorching",), "mild": ("mild",), "cold": ("freezing",)},
        moisture_adj={"high": ("damp",), "medium": ("fresh",), "low": ("dry",)},
        light_adj={"dark": ("dim",), "medium": ("dappled",), "bright": ("vivid",)},
        feature_fallback=("something",),
        sentence_patterns=("You notice {feature}; it is {adj}.",),
    )


@pytest.fixture
def vocabulary(forest_biome, keywords):
    return VocabularyStore(biomes={"forest": forest_biome}, keywords={"en": keywords})
