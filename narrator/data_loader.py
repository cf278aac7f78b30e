"""
Narrator — narrator/data_loader.py
JIT Data Loaders for TOML narrative data powered by Pydantic.
=============================================================================================
Stack:       Python 3.11+ | Pydantic v2 | tomllib
Status:      Vocabulary Store: validation and loading layer. Read-only after load.

Data layout (DATA_DIR)
----------------------
  narrative/biomes/<terrain>.toml   BiomeTemplateData (templates, vocabulary pools, finds)
  narrative/keywords.toml           KeywordVariations, one table per language
  items/registry.toml               ItemDefinition registry, one table per item id
  i18n/<lang>.toml                  message catalogs (see narrator/i18n.py)
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator, model_validator

from narrator.conditions import Condition, parse_conditions
from narrator.mood import MoodTag
from world.chunk import TranslatableString

logger = logging.getLogger(__name__)

# ================================================================================
# DESIGN VARIABLES
# ================================================================================

DEFAULT_TEMPLATE_WEIGHT: float = 0.5
VOCABULARY_POOLS = ("adjectives", "features", "smells", "sounds", "sky")

DATA_DIR = Path(__file__).parent.parent / "data"


class NarrativeDataError(ValueError):
    """A data file exists but does not validate."""


# ================================================================================
# SCHEMAS
# ================================================================================

class TemplateType(StrEnum):
    OPENING = "Opening"
    ENVIRONMENT_DETAIL = "EnvironmentDetail"
    SENSORY_DETAIL = "SensoryDetail"
    ENTITY_REPORT = "EntityReport"
    CLOSING = "Closing"


def _conditions(value: Any) -> Any:
    if value is None or isinstance(value, Mapping):
        return parse_conditions(value)
    return value


# Authored tables are parsed into typed condition variants on load.
ConditionField = Annotated[Tuple[Condition, ...], BeforeValidator(_conditions)]


class NarrativeTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    type: TemplateType
    mood: Tuple[MoodTag, ...] = ()     # empty matches any mood
    length: str = "medium"             # advisory only
    conditions: ConditionField = ()
    weight: float = Field(default=DEFAULT_TEMPLATE_WEIGHT, gt=0)
    template: str


class BiomeItemTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)
    name: str
    chance: Optional[float] = Field(default=None, ge=0, le=1)
    conditions: ConditionField = ()

    @model_validator(mode="before")
    @classmethod
    def _lift_chance(cls, data: Any) -> Any:
        # Authored tables may keep the roll chance inside [conditions].
        if isinstance(data, Mapping):
            conditions = data.get("conditions")
            if isinstance(conditions, Mapping) and "chance" in conditions:
                data = dict(data)
                conditions = dict(conditions)
                data.setdefault("chance", conditions.pop("chance"))
                data["conditions"] = conditions
        return data


class BiomeTemplateData(BaseModel):
    model_config = ConfigDict(frozen=True)
    terrain: str
    emoji: str = ""
    description_templates: Tuple[NarrativeTemplate, ...] = ()
    adjectives: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    features: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    smells: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    sounds: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    sky: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    items: Tuple[BiomeItemTemplate, ...] = ()

    @field_validator("description_templates", mode="before")
    @classmethod
    def _drop_malformed(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        kept = []
        for raw in value:
            try:
                kept.append(raw if isinstance(raw, NarrativeTemplate) else NarrativeTemplate.model_validate(raw))
            except ValidationError as exc:
                template_id = raw.get("id", "?") if isinstance(raw, Mapping) else "?"
                logger.warning("Dropping malformed narrative template %s: %s", template_id, exc.errors()[0]["msg"])
        return kept

    def pool(self, keyword: str) -> Optional[Tuple[str, ...]]:
        """Looks a {{keyword}} up across the vocabulary pools in priority order."""
        for pool_name in VOCABULARY_POOLS:
            entries = getattr(self, pool_name).get(keyword)
            if entries:
                return entries
        return None

    def first_feature_pool(self) -> Tuple[str, ...]:
        for entries in self.features.values():
            if entries:
                return entries
        return ()


class KeywordVariations(BaseModel):
    model_config = ConfigDict(frozen=True)
    temp_adj: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)        # hot | mild | cold
    moisture_adj: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)    # high | medium | low
    light_adj: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)       # dark | medium | bright
    feature_fallback: Tuple[str, ...] = ("something",)
    sentence_patterns: Tuple[str, ...] = ()
    phrases: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)


class QuantityRange(BaseModel):
    model_config = ConfigDict(frozen=True)
    min: int = 1
    max: int = 1


class ItemDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str = ""
    name: TranslatableString
    description: TranslatableString = ""
    tier: int = 1
    emoji: str = ""
    base_quantity: QuantityRange = Field(default_factory=QuantityRange)
    spawn_enabled: bool = True
    effects: List[Dict[str, Any]] = Field(default_factory=list)


# ================================================================================
# LOADERS & CACHE (JIT)
# ================================================================================

_BIOME_CACHE: Dict[Tuple[Path, str], BiomeTemplateData] = {}
_KEYWORD_CACHE: Dict[Path, Dict[str, KeywordVariations]] = {}
_ITEM_CACHE: Dict[Path, Dict[str, ItemDefinition]] = {}


def clear_caches() -> None:
    _BIOME_CACHE.clear()
    _KEYWORD_CACHE.clear()
    _ITEM_CACHE.clear()


def _load_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _validate(model, data: Any, path: Path):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise NarrativeDataError(f"Invalid narrative data in {path}: {exc}") from exc


def get_biome_template_data(terrain: str, data_dir: Path = DATA_DIR) -> BiomeTemplateData:
    """JIT loads one biome's narrative data from TOML."""
    key = (data_dir, terrain)
    if key in _BIOME_CACHE:
        return _BIOME_CACHE[key]

    path = data_dir / "narrative" / "biomes" / f"{terrain}.toml"
    if not path.exists():
        raise FileNotFoundError(f"Biome narrative data not found: {path}")

    biome = _validate(BiomeTemplateData, _load_toml(path), path)
    _BIOME_CACHE[key] = biome
    return biome


def get_biome_templates(data_dir: Path = DATA_DIR) -> Dict[str, BiomeTemplateData]:
    """Loads every biome under narrative/biomes, keyed by file stem."""
    path = data_dir / "narrative" / "biomes"
    if not path.exists():
        return {}
    return {file.stem: get_biome_template_data(file.stem, data_dir) for file in sorted(path.glob("*.toml"))}


def get_keyword_variations(data_dir: Path = DATA_DIR) -> Dict[str, KeywordVariations]:
    """Loads the per-language keyword variation tables. Cached globally."""
    if data_dir in _KEYWORD_CACHE:
        return _KEYWORD_CACHE[data_dir]

    path = data_dir / "narrative" / "keywords.toml"
    if not path.exists():
        return {}

    data = _load_toml(path)
    tables = {lang: _validate(KeywordVariations, table, path) for lang, table in data.items()}
    _KEYWORD_CACHE[data_dir] = tables
    return tables


def get_item_definitions(data_dir: Path = DATA_DIR) -> Dict[str, ItemDefinition]:
    """Loads the item registry. Each definition's id defaults to its table key."""
    if data_dir in _ITEM_CACHE:
        return _ITEM_CACHE[data_dir]

    path = data_dir / "items" / "registry.toml"
    if not path.exists():
        return {}

    data = _load_toml(path).get("items", {})
    registry = {}
    for item_id, table in data.items():
        table = {"id": item_id, **table}
        registry[item_id] = _validate(ItemDefinition, table, path)
    _ITEM_CACHE[data_dir] = registry
    return registry


# ================================================================================
# VOCABULARY STORE
# ================================================================================

@dataclass(frozen=True)
class VocabularyStore:
    """Immutable bundle of biome data and keyword tables, built once and injected."""
    biomes: Mapping[str, BiomeTemplateData] = field(default_factory=dict)
    keywords: Mapping[str, KeywordVariations] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "biomes", MappingProxyType(dict(self.biomes)))
        object.__setattr__(self, "keywords", MappingProxyType(dict(self.keywords)))

    @classmethod
    def load(cls, data_dir: Path = DATA_DIR) -> "VocabularyStore":
        return cls(biomes=get_biome_templates(data_dir), keywords=get_keyword_variations(data_dir))

    @classmethod
    def from_settings(cls, settings) -> "VocabularyStore":
        return cls.load(settings.data_dir)

    def biome_for(self, terrain: str) -> Optional[BiomeTemplateData]:
        """Case-tolerant biome lookup, falling back to each record's own terrain name."""
        if not terrain:
            return None
        for key in (terrain, terrain.lower(), terrain[:1].upper() + terrain[1:]):
            if key in self.biomes:
                return self.biomes[key]
        wanted = terrain.lower()
        for biome in self.biomes.values():
            if biome.terrain.lower() == wanted:
                return biome
        return None

    def keyword_variations(self, language: str) -> KeywordVariations:
        return self.keywords.get(language) or self.keywords.get("en") or KeywordVariations()
