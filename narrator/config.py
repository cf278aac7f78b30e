"""
Narrator — narrator/config.py
Runtime settings from the environment (.env is loaded first).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from narrator.data_loader import DATA_DIR
from narrator.i18n import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DATA_DIR
    language: str = DEFAULT_LANGUAGE
    strict_sensory: bool = False
    dev_mode: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        language = os.getenv("NARRATOR_LANGUAGE", DEFAULT_LANGUAGE).strip().lower()
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"NARRATOR_LANGUAGE must be one of {SUPPORTED_LANGUAGES}, got {language!r}")
        data_dir = os.getenv("NARRATOR_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else DATA_DIR,
            language=language,
            strict_sensory=_env_flag("NARRATOR_STRICT_SENSORY"),
            dev_mode=_env_flag("NARRATOR_DEV_MODE"),
        )

    @property
    def i18n_dir(self) -> Path:
        return self.data_dir / "i18n"


def configure_logging(dev_mode: bool) -> None:
    level = logging.DEBUG if dev_mode else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
