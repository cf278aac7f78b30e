"""
Narrator — narrator/conditions.py
Condition Evaluator: structured eligibility predicates for templates and finds.
==============================================================================

Authored condition tables are loose mappings (TOML / JSON). They are parsed
once into a closed set of typed variants; evaluation is a logical AND over
the variants. Absent keys impose no constraint.

  timeOfDay         "day" | "night"              -> TimeOfDayCondition
  soilType          [soil, ...]                  -> SoilTypeCondition
  playerHealth      {min, max}                   -> PlayerStatCondition(hp)
  playerStamina     {min, max}                   -> PlayerStatCondition(stamina)
  requiredEntities  {enemyType?, itemType?}      -> EntityPresenceCondition
  <chunk field>     {min, max}                   -> NumericRangeCondition

Keys may be camelCase or snake_case. Keys naming nothing above are ignored.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_snake

from narrator.i18n import get_translated_text
from world.chunk import CHUNK_NUMERIC_FIELDS, Chunk, PlayerState
from world.clock import DAY_DURATION, DAY_START_TIME, is_day

logger = logging.getLogger(__name__)

# Entity names are compared in one fixed language so results do not depend
# on the player's locale.
REFERENCE_LANGUAGE: str = "en"

PLAYER_STAT_MIN: float = 0
PLAYER_STAT_MAX: float = 100


class _Condition(BaseModel):
    model_config = ConfigDict(frozen=True)

    def check(self, chunk: Chunk, player_state: Optional[PlayerState] = None) -> bool:
        raise NotImplementedError


class TimeOfDayCondition(_Condition):
    kind: Literal["time_of_day"] = "time_of_day"
    value: Literal["day", "night"]

    def check(self, chunk, player_state=None):
        if chunk.game_time is None:
            return True
        daytime = is_day(chunk.game_time, DAY_START_TIME, DAY_DURATION)
        return daytime if self.value == "day" else not daytime


class SoilTypeCondition(_Condition):
    kind: Literal["soil_type"] = "soil_type"
    allowed: Tuple[str, ...]

    def check(self, chunk, player_state=None):
        return chunk.soil_type in self.allowed


class PlayerStatCondition(_Condition):
    kind: Literal["player_stat"] = "player_stat"
    stat: Literal["hp", "stamina"]
    min: float = PLAYER_STAT_MIN
    max: float = PLAYER_STAT_MAX

    def check(self, chunk, player_state=None):
        # Without a player snapshot the condition is skipped, not failed.
        if player_state is None:
            return True
        value = getattr(player_state, self.stat)
        return self.min <= value <= self.max


class EntityPresenceCondition(_Condition):
    kind: Literal["entity_presence"] = "entity_presence"
    enemy_type: Optional[str] = None
    item_type: Optional[str] = None

    def check(self, chunk, player_state=None):
        if not self.enemy_type and not self.item_type:
            return True
        if self.enemy_type and chunk.enemy is not None:
            if get_translated_text(chunk.enemy.type, REFERENCE_LANGUAGE) == self.enemy_type:
                return True
        if self.item_type:
            return any(
                get_translated_text(item.name, REFERENCE_LANGUAGE) == self.item_type
                for item in chunk.items
            )
        return False


class NumericRangeCondition(_Condition):
    kind: Literal["numeric_range"] = "numeric_range"
    field: str
    min: Optional[float] = None
    max: Optional[float] = None

    def check(self, chunk, player_state=None):
        value = chunk.numeric_value(self.field)
        if value is None:
            return True
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


Condition = Union[
    TimeOfDayCondition,
    SoilTypeCondition,
    PlayerStatCondition,
    EntityPresenceCondition,
    NumericRangeCondition,
]
ConditionSet = Tuple[Condition, ...]

_PLAYER_STATS = {"player_health": "hp", "player_stamina": "stamina"}


def _range(value: Any) -> dict:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected a {{min, max}} table, got {value!r}")
    return {k: value[k] for k in ("min", "max") if value.get(k) is not None}


def parse_condition(key: str, value: Any) -> Optional[Condition]:
    """Parses one authored key/value pair. Returns None for keys that constrain nothing."""
    name = to_snake(key)
    if name == "time_of_day":
        return TimeOfDayCondition(value=value)
    if name == "soil_type":
        if isinstance(value, (list, tuple)):
            return SoilTypeCondition(allowed=tuple(value))
        return None
    if name in _PLAYER_STATS:
        return PlayerStatCondition(stat=_PLAYER_STATS[name], **_range(value))
    if name == "required_entities":
        value = {to_snake(k): v for k, v in dict(value or {}).items()}
        return EntityPresenceCondition(
            enemy_type=value.get("enemy_type"),
            item_type=value.get("item_type"),
        )
    if name in CHUNK_NUMERIC_FIELDS and isinstance(value, Mapping):
        return NumericRangeCondition(field=name, **_range(value))
    logger.debug("Ignoring condition key with no chunk counterpart: %s", key)
    return None


def parse_conditions(raw: Optional[Mapping[str, Any]]) -> ConditionSet:
    if not raw:
        return ()
    parsed = (parse_condition(key, value) for key, value in raw.items())
    return tuple(c for c in parsed if c is not None)


def check_conditions(
    conditions: Union[None, Mapping[str, Any], Iterable[Condition]],
    chunk: Chunk,
    player_state: Optional[PlayerState] = None,
) -> bool:
    """True when every condition holds. No conditions at all is always true."""
    if not conditions:
        return True
    if isinstance(conditions, Mapping):
        conditions = parse_conditions(conditions)
    return all(c.check(chunk, player_state) for c in conditions)
