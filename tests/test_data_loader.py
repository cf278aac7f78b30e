import logging
import re

import pytest

from narrator.conditions import NumericRangeCondition
from narrator.data_loader import (
    DATA_DIR,
    NarrativeDataError,
    TemplateType,
    VocabularyStore,
    get_biome_template_data,
    get_item_definitions,
    get_keyword_variations,
)
from narrator.mood import MoodTag

BIOME_TOML = """
terrain = "marsh"

[[description_templates]]
id = "good"
type = "Opening"
mood = ["Wet"]
conditions = { lightLevel = { max = 40 } }
template = "A {{adj}} marsh."

[[description_templates]]
id = "bad_type"
type = "Prologue"
template = "Never loaded."

[[description_templates]]
id = "bad_weight"
type = "Closing"
weight = 0
template = "Never loaded."

[adjectives]
adj = ["misty"]

[[items]]
name = "swamp_reed"
conditions = { chance = 0.3, moisture = { min = 60 } }
"""


def _write(tmp_path, relative, text):
    path = tmp_path / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_malformed_templates_dropped(tmp_path, caplog):
    _write(tmp_path, "narrative/biomes/marsh.toml", BIOME_TOML)
    with caplog.at_level(logging.WARNING):
        biome = get_biome_template_data("marsh", tmp_path)
    assert [tmpl.id for tmpl in biome.description_templates] == ["good"]
    assert "bad_type" in caplog.text

    (tmpl,) = biome.description_templates
    assert tmpl.type == TemplateType.OPENING
    assert tmpl.mood == (MoodTag.WET,)
    assert tmpl.weight == 0.5
    assert tmpl.conditions == (NumericRangeCondition(field="light_level", max=40),)


def test_item_chance_lifted_out_of_conditions(tmp_path):
    _write(tmp_path, "narrative/biomes/marsh.toml", BIOME_TOML)
    (item,) = get_biome_template_data("marsh", tmp_path).items
    assert item.chance == 0.3
    assert item.conditions == (NumericRangeCondition(field="moisture", min=60),)


def test_missing_biome_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_biome_template_data("nowhere", tmp_path)


def test_invalid_biome_raises_data_error(tmp_path):
    _write(tmp_path, "narrative/biomes/broken.toml", 'emoji = "x"\n')
    with pytest.raises(NarrativeDataError):
        get_biome_template_data("broken", tmp_path)


def test_item_registry_ids_default_to_keys(tmp_path):
    _write(tmp_path, "items/registry.toml", """
[items.torch]
name = { en = "Torch" }
base_quantity = { min = 1, max = 2 }

[items.relic]
name = "Relic"
spawn_enabled = false
""")
    registry = get_item_definitions(tmp_path)
    assert registry["torch"].id == "torch"
    assert registry["torch"].base_quantity.max == 2
    assert registry["relic"].spawn_enabled is False


def test_vocabulary_store_is_read_only(vocabulary):
    with pytest.raises(TypeError):
        vocabulary.biomes["cave"] = None


def test_biome_lookup_tolerates_case(vocabulary, forest_biome):
    assert vocabulary.biome_for("Forest") is forest_biome
    assert vocabulary.biome_for("FOREST") is forest_biome
    assert vocabulary.biome_for("") is None
    assert vocabulary.biome_for("moon") is None


def test_keyword_variations_fall_back_to_english(vocabulary, keywords):
    assert vocabulary.keyword_variations("vi") is keywords
    assert VocabularyStore().keyword_variations("en").feature_fallback == ("something",)


def test_bundled_data_loads():
    store = VocabularyStore.load(DATA_DIR)
    assert {"forest", "jungle", "cave"} <= set(store.biomes)
    for biome in store.biomes.values():
        assert biome.description_templates

    keywords = get_keyword_variations(DATA_DIR)
    assert set(keywords) == {"en", "vi"}
    assert keywords["en"].sentence_patterns

    registry = get_item_definitions(DATA_DIR)
    for biome in store.biomes.values():
        for item in biome.items:
            assert item.name in registry
    assert any(not item.spawn_enabled for item in registry.values())


def test_bundled_keywords_have_five_patterns_per_language():
    keywords = get_keyword_variations(DATA_DIR)
    assert {lang: len(table.sentence_patterns) for lang, table in keywords.items()} == {"en": 5, "vi": 5}
    for table in keywords.values():
        assert "{feature}, {adj}." in table.sentence_patterns


def test_bundled_placeholders_all_resolve():
    store = VocabularyStore.load(DATA_DIR)
    for language in ("en", "vi"):
        phrases = store.keyword_variations(language).phrases
        for biome in store.biomes.values():
            for tmpl in biome.description_templates:
                for keyword in re.findall(r"\{\{(.*?)\}\}", tmpl.template):
                    keyword = keyword.strip()
                    assert biome.pool(keyword) or phrases.get(keyword), (biome.terrain, tmpl.id, keyword)
