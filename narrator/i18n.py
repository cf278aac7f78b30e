"""
Narrator — narrator/i18n.py
Localization seams: localized-name resolution and a TOML-backed message catalog.
==============================================================================
Stack:       Python 3.11+ | tomllib

The core never embeds player-facing text outside the vocabulary tables.
Everything else goes through a Translator: (key, replacements?) -> str.
"""

from __future__ import annotations

import logging
import random
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from world.chunk import TranslatableString

logger = logging.getLogger(__name__)

Translator = Callable[..., str]

DEFAULT_LANGUAGE: str = "en"
SUPPORTED_LANGUAGES = ("en", "vi")


def format_message(text: str, replacements: Optional[Mapping[str, Any]] = None) -> str:
    """Substitutes {name} markers. Unknown markers are left as-is."""
    if not replacements:
        return text
    for name, value in replacements.items():
        text = text.replace("{" + name + "}", str(value))
    return text


def get_translated_text(
    translatable: Optional[TranslatableString],
    language: str,
    t: Optional[Translator] = None,
) -> str:
    """Resolves a localized name for `language`.

    Plain strings are treated as message keys when a translator is given.
    Mappings carrying a "key" are translation objects. Any other mapping is
    an inline {lang: text} table, falling back to English, then to whatever
    text is present.
    """
    if not translatable:
        return ""
    if isinstance(translatable, str):
        return t(translatable) if t else translatable
    if isinstance(translatable, Mapping):
        if "key" in translatable:
            key = str(translatable["key"])
            return t(key, translatable.get("params")) if t else key
        text = translatable.get(language) or translatable.get(DEFAULT_LANGUAGE)
        if text:
            return str(text)
        for value in translatable.values():
            if value:
                return str(value)
    return ""


class MessageCatalog:
    """Per-language message tables loaded from data/i18n/<lang>.toml."""

    def __init__(self, messages: Dict[str, Dict[str, Any]], rng: Optional[random.Random] = None):
        self._messages = messages
        self._rng = rng or random

    @classmethod
    def load(cls, directory: Path, rng: Optional[random.Random] = None) -> "MessageCatalog":
        messages: Dict[str, Dict[str, Any]] = {}
        if directory.exists():
            for file in sorted(directory.glob("*.toml")):
                with open(file, "rb") as f:
                    messages[file.stem] = tomllib.load(f)
        else:
            logger.warning("Message catalog directory not found: %s", directory)
        return cls(messages, rng=rng)

    @property
    def languages(self) -> list[str]:
        return sorted(self._messages)

    def lookup(self, language: str, key: str) -> Optional[str]:
        table = self._messages.get(language) or self._messages.get(DEFAULT_LANGUAGE, {})
        value = table.get(key)
        if value is None and language != DEFAULT_LANGUAGE:
            value = self._messages.get(DEFAULT_LANGUAGE, {}).get(key)
        if isinstance(value, list):
            return self._rng.choice(value) if value else None
        return value

    def translator(self, language: str) -> Translator:
        def t(key: str, replacements: Optional[Mapping[str, Any]] = None) -> str:
            text = self.lookup(language, key)
            if text is None:
                logger.debug("Missing translation for %r (%s)", key, language)
                text = key
            return format_message(text, replacements)
        return t
