"""Layered TOML settings.

Built-in defaults are overlaid by the per-user config file, an optional
``whid.toml`` in the working directory, the ``GEMINI_API_KEY`` environment
variable, and finally CLI overrides. Missing or malformed files contribute
nothing.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "whid"
CONFIG_FILENAME = "whid.toml"
API_KEY_ENV_VAR = "GEMINI_API_KEY"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LOCAL_CONFIG_PATH = Path(CONFIG_FILENAME)
SUPPORTED_LANGS = ("en", "de")

USER_CONFIG_TEMPLATE = """\
# whid configuration
#
# gemini_api_key = "your-key"   # or export GEMINI_API_KEY
gemini_model = "gemini-2.0-flash"
# custom_prompt_path = "~/prompt.txt"
lang = "en"
# timeframe = "24"              # 24, 48, 72, week, month
# filter_by_user = true
# detailed_commit_view = false
"""


@dataclass(frozen=True)
class Settings:
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_key: str | None = None
    custom_prompt_path: str | None = None
    lang: str = "en"
    timeframe: str = "24"
    filter_by_user: bool = True
    detailed_commit_view: bool = False

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key and self.gemini_api_key.strip())


_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "gemini_model": (str,),
    "gemini_api_key": (str,),
    "custom_prompt_path": (str,),
    "lang": (str,),
    "timeframe": (str, int),
    "filter_by_user": (bool,),
    "detailed_commit_view": (bool,),
}


def load_config_file(path: Path) -> dict[str, object]:
    """Load one TOML file, returning ``{}`` when missing or malformed."""
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring config file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _normalized_overrides(raw: dict[str, object], source: str) -> dict[str, object]:
    """Keep only known keys whose values have the expected type."""
    known = {field.name for field in fields(Settings)}
    out: dict[str, object] = {}
    for key, value in raw.items():
        if key not in known:
            continue
        expected = _FIELD_TYPES[key]
        # bool is an int subclass; only accept it where bool is declared.
        if isinstance(value, bool) and bool not in expected:
            logger.warning("ignoring %s in %s: unexpected type", key, source)
            continue
        if not isinstance(value, expected):
            logger.warning("ignoring %s in %s: unexpected type", key, source)
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        if key == "timeframe":
            value = str(value)
        if key == "lang" and value not in SUPPORTED_LANGS:
            logger.warning("unsupported lang %r in %s, keeping default", value, source)
            continue
        out[key] = value
    return out


def ensure_user_config(path: Path | None = None) -> bool:
    """Write a commented template when the user config file does not exist yet.

    Returns ``True`` when a file was created. Write failures are ignored.
    """
    target = CONFIG_PATH if path is None else path
    if target.exists():
        return False
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(USER_CONFIG_TEMPLATE, encoding="utf-8")
    except OSError as exc:
        logger.warning("could not create %s: %s", target, exc)
        return False
    return True


def load_settings(
    overrides: dict[str, object] | None = None,
    *,
    user_path: Path | None = None,
    local_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Merge all configuration sources into one ``Settings`` value.

    ``overrides`` are already-parsed CLI values; ``None`` entries mean "not
    given" and do not mask lower layers.
    """
    user_file = CONFIG_PATH if user_path is None else user_path
    local_file = LOCAL_CONFIG_PATH if local_path is None else local_path
    env = os.environ if environ is None else environ

    settings = Settings()
    for source in (user_file, local_file):
        settings = replace(settings, **_normalized_overrides(load_config_file(source), str(source)))

    env_key = env.get(API_KEY_ENV_VAR, "").strip()
    if env_key:
        settings = replace(settings, gemini_api_key=env_key)

    if overrides:
        given = {key: value for key, value in overrides.items() if value is not None}
        settings = replace(settings, **_normalized_overrides(given, "command line"))
    return settings


def missing_key_message(config_path: Path | None = None) -> str:
    """Remediation text shown when no API key is configured."""
    path = CONFIG_PATH if config_path is None else config_path
    return (
        "No Gemini API key configured.\n"
        "\n"
        f"Add  gemini_api_key = \"<your key>\"  to {path}\n"
        f"or export {API_KEY_ENV_VAR}=<your key> and restart whid."
    )
