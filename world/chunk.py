"""
Narrator — world/chunk.py
Chunk data contract: the read-only world tile handed to the narration core.
============================================================================
Stack:       Python 3.11+ | Pydantic v2
Status:      Consumed, never produced, by this package.

Architecture notes
------------------
- The terrain generator owns these values. Narration only reads them.
- Field names are snake_case; the camelCase names emitted by the
  generator (lightLevel, dangerLevel, ...) are accepted as aliases.
- Chunks are frozen. Changes go through the with_* / without_* helpers,
  which return a new Chunk and leave the original untouched.
- temperature and wind_level may be absent. Absent means unknown, not zero.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# A localized name: a message key / plain text, a {lang: text} mapping,
# or a {"key": ..., "params": {...}} translation object.
TranslatableString = Union[str, Dict[str, Any]]

# Numeric chunk attributes that template conditions may range-test.
CHUNK_NUMERIC_FIELDS = (
    "vegetation_density",
    "moisture",
    "elevation",
    "light_level",
    "danger_level",
    "magic_affinity",
    "human_presence",
    "predator_presence",
    "explorability",
    "temperature",
    "wind_level",
)


class _WorldModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ChunkItem(_WorldModel):
    name: TranslatableString
    id: Optional[str] = None
    description: TranslatableString = ""
    quantity: int = 1
    tier: int = 1
    emoji: str = ""


class Enemy(_WorldModel):
    type: TranslatableString
    emoji: str = ""
    hp: float = 0
    damage: float = 0
    behavior: str = "passive"
    size: str = "medium"


class ChunkAction(_WorldModel):
    id: int
    text_key: str = ""
    params: Dict[str, Any] = Field(default_factory=dict)


class PlayerState(_WorldModel):
    hp: float = 100
    stamina: float = 100
    mana: float = 100


class Chunk(_WorldModel):
    terrain: str
    x: int = 0
    y: int = 0
    description: str = ""

    vegetation_density: float = 50
    moisture: float = 50
    elevation: float = 50
    light_level: float = 50          # signed, roughly -100..100
    danger_level: float = 0
    magic_affinity: float = 0
    human_presence: float = 0
    predator_presence: float = 0
    explorability: float = 50
    temperature: Optional[float] = None   # signed, C-like scale
    wind_level: Optional[float] = None
    soil_type: str = "loamy"

    items: List[ChunkItem] = Field(default_factory=list)
    enemy: Optional[Enemy] = None
    npcs: List[Dict[str, Any]] = Field(default_factory=list, alias="NPCs")
    structures: List[Dict[str, Any]] = Field(default_factory=list)
    actions: List[ChunkAction] = Field(default_factory=list)
    explored: bool = False
    game_time: Optional[int] = None

    def numeric_value(self, field_name: str) -> Optional[float]:
        """Returns a numeric attribute by name, or None when unknown."""
        if field_name not in CHUNK_NUMERIC_FIELDS:
            return None
        return getattr(self, field_name)

    def without_action(self, action_id: int) -> "Chunk":
        """Returns a copy of this chunk with the given pending action removed."""
        remaining = [a for a in self.actions if a.id != action_id]
        return self.model_copy(update={"actions": remaining, "items": list(self.items)})

    def with_items(self, items: List[ChunkItem]) -> "Chunk":
        return self.model_copy(update={"items": list(items)})

    def with_item_quantity(self, index: int, quantity: int) -> "Chunk":
        """Returns a copy with the item stack at `index` set to `quantity`."""
        items = list(self.items)
        items[index] = items[index].model_copy(update={"quantity": quantity})
        return self.with_items(items)
