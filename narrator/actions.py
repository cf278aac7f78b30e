"""
Narrator — narrator/actions.py
ActionNarrator: Translates resolved action outcomes into human-readable prose.
=============================================================================

The numbers are decided upstream (combat, taming, skills). This module only
picks message keys and fills them. Results are never mutated.

  attack    actionNarrative_attack_<critFail|fail|success|critSuccess>
  useItem   itemUsePlayer<Success|Fail>Narrative | itemTame<Success|Fail>Narrative
  useSkill  skillCritFailNarrative | skillFailNarrative |
            skillHealSuccessNarrative | skillDamageSuccessNarrative (+ skillSiphonNarrative)

Sensory feedback
----------------
Three axis keys are built (hot/cold, dark/normal, rain/normal) and one is
picked at random whether or not its condition holds. strict_sensory=True
only picks among axes whose condition holds (sensoryFeedback_normal if none).
"""

from __future__ import annotations

import logging
import random
from enum import StrEnum
from typing import Annotated, Any, Callable, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from narrator.i18n import Translator, get_translated_text
from world.chunk import Chunk, TranslatableString

logger = logging.getLogger(__name__)

# Sensory axis thresholds.
SENSORY_HOT_ABOVE: float = 80
SENSORY_COLD_AT_OR_BELOW: float = 0
SENSORY_DARK_BELOW: float = 20
SENSORY_RAIN_ABOVE: float = 70

PLAYER_TARGET = "player"
UNKNOWN_ACTION_KEY = "unknownActionNarrative"


class ActionKind(StrEnum):
    ATTACK = "attack"
    USE_ITEM = "useItem"
    USE_SKILL = "useSkill"


class SuccessLevel(StrEnum):
    CRITICAL_FAILURE = "CriticalFailure"
    FAILURE = "Failure"
    SUCCESS = "Success"
    GREAT_SUCCESS = "GreatSuccess"
    CRITICAL_SUCCESS = "CriticalSuccess"


class SkillEffectType(StrEnum):
    HEAL = "HEAL"
    DAMAGE = "DAMAGE"


ATTACK_SUFFIXES: Dict[SuccessLevel, str] = {
    SuccessLevel.CRITICAL_FAILURE: "critFail",
    SuccessLevel.FAILURE: "fail",
    SuccessLevel.SUCCESS: "success",
    SuccessLevel.GREAT_SUCCESS: "success",
    SuccessLevel.CRITICAL_SUCCESS: "critSuccess",
}


# ============================================================
# ACTION RESULTS  (Pydantic v2, discriminated on "kind")
# ============================================================

class _Result(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class AttackResult(_Result):
    kind: Literal["attack"] = "attack"
    success_level: SuccessLevel
    player_damage: float = 0
    enemy_damage: float = 0
    enemy_defeated: bool = False
    fled: bool = False
    final_player_hp: Optional[float] = None
    final_enemy_hp: Optional[float] = None


class ItemUseResult(_Result):
    kind: Literal["useItem"] = "useItem"
    item_name: TranslatableString
    target: TranslatableString = PLAYER_TARGET
    was_used: bool = False
    was_tamed: bool = False
    effect_description: str = ""


class SkillEffect(_Result):
    type: str
    amount: float = 0


class SkillRef(_Result):
    name: TranslatableString
    effect: SkillEffect


class SkillUseResult(_Result):
    kind: Literal["useSkill"] = "useSkill"
    skill: SkillRef
    success_level: SuccessLevel
    healed_amount: float = 0
    final_damage: float = 0
    backfire_damage: float = 0
    siphoned_amount: float = 0


ActionResult = Annotated[
    Union[AttackResult, ItemUseResult, SkillUseResult],
    Field(discriminator="kind"),
]
_ACTION_RESULT = TypeAdapter(ActionResult)


def parse_action_result(data: Mapping[str, Any]) -> ActionResult:
    return _ACTION_RESULT.validate_python(data)


def _number(value: float) -> Union[int, float]:
    value = float(value)
    return int(value) if value.is_integer() else round(value, 1)


# ============================================================
# NARRATOR
# ============================================================

class ActionNarrator:
    def __init__(self, rng: Optional[random.Random] = None, strict_sensory: bool = False):
        self.rng = rng or random
        self.strict_sensory = strict_sensory
        self._handlers: Dict[ActionKind, Callable[..., Optional[str]]] = {
            ActionKind.ATTACK: self._narrate_attack,
            ActionKind.USE_ITEM: self._narrate_item,
            ActionKind.USE_SKILL: self._narrate_skill,
        }
        self._result_types = {
            ActionKind.ATTACK: AttackResult,
            ActionKind.USE_ITEM: ItemUseResult,
            ActionKind.USE_SKILL: SkillUseResult,
        }

    @classmethod
    def from_settings(cls, settings, rng: Optional[random.Random] = None) -> "ActionNarrator":
        return cls(rng=rng, strict_sensory=settings.strict_sensory)

    def sensory_feedback_key(self, chunk: Chunk) -> str:
        temp = chunk.temperature
        hot = temp is not None and temp > SENSORY_HOT_ABOVE
        dark = chunk.light_level < SENSORY_DARK_BELOW
        rain = chunk.moisture > SENSORY_RAIN_ABOVE

        if not self.strict_sensory:
            options = [
                f"sensoryFeedback_{'hot' if hot else 'cold'}",
                f"sensoryFeedback_{'dark' if dark else 'normal'}",
                f"sensoryFeedback_{'rain' if rain else 'normal'}",
            ]
            return self.rng.choice(options)

        cold = temp is not None and temp <= SENSORY_COLD_AT_OR_BELOW
        held = [
            key for key, active in (
                ("sensoryFeedback_hot", hot),
                ("sensoryFeedback_cold", cold),
                ("sensoryFeedback_dark", dark),
                ("sensoryFeedback_rain", rain),
            ) if active
        ]
        return self.rng.choice(held) if held else "sensoryFeedback_normal"

    def narrate(
        self,
        action_type: str,
        action_result: Union[ActionResult, Mapping[str, Any]],
        chunk: Chunk,
        t: Translator,
        language: str,
    ) -> str:
        """Narrates one finished action. Unknown or mismatched input yields the unknown-action line."""
        try:
            kind = ActionKind(action_type)
        except ValueError:
            logger.warning("Unknown action type: %s", action_type)
            return t(UNKNOWN_ACTION_KEY)

        if isinstance(action_result, Mapping):
            try:
                action_result = parse_action_result({"kind": kind.value, **action_result})
            except ValidationError as exc:
                logger.warning("Malformed %s result: %s", kind, exc.errors()[0]["msg"])
                return t(UNKNOWN_ACTION_KEY)

        if not isinstance(action_result, self._result_types[kind]):
            logger.warning("Result %s does not match action type %s", type(action_result).__name__, kind)
            return t(UNKNOWN_ACTION_KEY)

        enemy_type = (
            get_translated_text(chunk.enemy.type, language, t)
            if chunk.enemy is not None and chunk.enemy.type
            else t("creature")
        )
        sensory_feedback = t(self.sensory_feedback_key(chunk))
        narrative = self._handlers[kind](action_result, enemy_type, sensory_feedback, t, language)
        return narrative if narrative is not None else t(UNKNOWN_ACTION_KEY)

    def _narrate_attack(self, result: AttackResult, enemy_type, sensory_feedback, t, language):
        suffix = ATTACK_SUFFIXES[result.success_level]

        attack_description = t(f"attackNarrative_{suffix}", {"enemyType": enemy_type})
        damage_report = (
            t("attackDamageDealt", {"damage": _number(result.player_damage)})
            if result.player_damage > 0 else ""
        )
        if result.enemy_defeated:
            enemy_reaction = t("enemyDefeatedNarrative", {"enemyType": enemy_type})
        elif result.fled:
            enemy_reaction = t("enemyFledNarrative", {"enemyType": enemy_type})
        elif result.enemy_damage > 0:
            enemy_reaction = t("enemyRetaliationNarrative", {"enemyType": enemy_type, "damage": _number(result.enemy_damage)})
        else:
            enemy_reaction = t("enemyPreparesNarrative", {"enemyType": enemy_type})

        narrative = t(f"actionNarrative_attack_{suffix}", {
            "attack_description": attack_description,
            "damage_report": damage_report,
            "sensory_feedback": sensory_feedback,
            "enemy_reaction": enemy_reaction,
        })
        # An empty damage report leaves a double space behind.
        return " ".join(narrative.split())

    def _narrate_item(self, result: ItemUseResult, enemy_type, sensory_feedback, t, language):
        item = get_translated_text(result.item_name, language, t)
        if result.target == PLAYER_TARGET:
            key = "itemUsePlayerSuccessNarrative" if result.was_used else "itemUsePlayerFailNarrative"
            return t(key, {"item": item, "effect": result.effect_description, "sensory_feedback": sensory_feedback})

        key = "itemTameSuccessNarrative" if result.was_tamed else "itemTameFailNarrative"
        target = get_translated_text(result.target, language, t)
        return t(key, {"item": item, "target": target, "sensory_feedback": sensory_feedback})

    def _narrate_skill(self, result: SkillUseResult, enemy_type, sensory_feedback, t, language):
        skill_name = get_translated_text(result.skill.name, language, t)

        if result.success_level == SuccessLevel.CRITICAL_FAILURE:
            return t("skillCritFailNarrative", {
                "skillName": skill_name,
                "damage": _number(result.backfire_damage),
                "sensory_feedback": sensory_feedback,
            })
        if result.success_level == SuccessLevel.FAILURE:
            return t("skillFailNarrative", {"skillName": skill_name, "sensory_feedback": sensory_feedback})

        effect_type = result.skill.effect.type.upper()
        if effect_type == SkillEffectType.HEAL:
            return t("skillHealSuccessNarrative", {
                "skillName": skill_name,
                "amount": _number(result.healed_amount),
                "sensory_feedback": sensory_feedback,
            })
        if effect_type == SkillEffectType.DAMAGE:
            narrative = t("skillDamageSuccessNarrative", {
                "skillName": skill_name,
                "enemy": enemy_type,
                "damage": _number(result.final_damage),
                "sensory_feedback": sensory_feedback,
            })
            if result.siphoned_amount:
                narrative += " " + t("skillSiphonNarrative", {"amount": _number(result.siphoned_amount)})
            return narrative

        logger.warning("Unsupported skill effect type: %s", result.skill.effect.type)
        return None
