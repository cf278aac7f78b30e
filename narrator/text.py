"""
Narrator — narrator/text.py
Smart sentence joining: connectors and punctuation cleanup per length tier.
"""

from __future__ import annotations

import random
import re
from typing import Dict, Sequence, Tuple

CONNECTORS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "en": {
        "short": (" and ",),
        "medium": (" and ", ". Suddenly, ", ". Additionally, ", "."),
        "long": (", moreover, ", ". Furthermore, ", ". Not only that, ", ". Notably, ", ". Meanwhile, ", ". However, "),
    },
    "vi": {
        "short": (" và ",),
        "medium": (" và ", ". Bỗng nhiên, ", ". Ngoài ra, ", "."),
        "long": (", thêm vào đó ", ". Hơn thế nữa, ", ". Không chỉ vậy, ", ". Đáng chú ý là, ", ". Trong khi đó, ", ". Tuy nhiên, "),
    },
}
DEFAULT_CONNECTOR = ". "

_TRAILING = (".", ",", "!", "?")
_TERMINAL = (".", "!", "?")


def _connector(narrative_length: str, language: str, rng) -> str:
    table = CONNECTORS.get(language, CONNECTORS["en"])
    tier = "long" if narrative_length == "detailed" else narrative_length
    options = table.get(tier)
    return rng.choice(options) if options else DEFAULT_CONNECTOR


def smart_join_sentences(sentences: Sequence[str], narrative_length: str, language: str = "en", rng=random) -> str:
    """Joins sentences into one passage with length-appropriate pacing."""
    if not sentences:
        return ""
    if len(sentences) == 1:
        return sentences[0]

    result = sentences[0].strip()
    for sentence in sentences[1:]:
        sentence = sentence.strip()
        if not sentence:
            continue
        if result.endswith(_TRAILING):
            result = result[:-1]

        connector = _connector(narrative_length, language, rng)
        if result.endswith(_TERMINAL) and not connector.startswith(" "):
            result += " "
        if sentence.startswith(_TRAILING):
            result += " "
        else:
            result += connector
        result += sentence

    result = re.sub(r"\s{2,}", " ", result).strip()
    result = re.sub(r"\s+([.,!?;:])", r"\1", result)
    result = re.sub(r"([.,!?;:]){2,}", r"\1", result)
    result = re.sub(r"([.,])([A-Z])", r"\1 \2", result)

    if result and not result.endswith(_TERMINAL):
        result += "."
    return result
