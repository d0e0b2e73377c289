"""Message lookup for the TUI and the command line.

English is the reference pack. Every other pack is completed from it at import
time, so a missing translation shows English text instead of the raw key.
Counted messages pick a plural variant (``KEY_ONE``, ``KEY_FEW``) by the
language's rules and fall back to the plain key.
"""

import logging
import os
from typing import Dict, Optional

from config import get_user_lang
from core.desktop.devtools.interface.constants import LANG_PACK

logger = logging.getLogger("beadtree.i18n")

BASE_LANG = "en"
LANG_ENV = "BEADTREE_LANG"


def complete_packs(packs: Dict[str, Dict[str, str]], base_lang: str = BASE_LANG) -> Dict[str, int]:
    """Copy base entries into packs that lack them; returns borrowed-key counts per language."""
    base = packs.get(base_lang, {})
    borrowed: Dict[str, int] = {}
    for lang, values in packs.items():
        if lang == base_lang:
            continue
        missing = [key for key in base if key not in values]
        for key in missing:
            values[key] = base[key]
        borrowed[lang] = len(missing)
    return borrowed


BORROWED_KEYS = complete_packs(LANG_PACK)


def effective_lang(preferred: Optional[str] = None) -> str:
    """BEADTREE_LANG wins, tests always get English, then `preferred` or the configured language."""
    forced = os.getenv(LANG_ENV)
    if forced in LANG_PACK:
        return forced
    if os.getenv("PYTEST_CURRENT_TEST"):
        return BASE_LANG
    candidate = preferred or get_user_lang()
    return candidate if candidate in LANG_PACK else BASE_LANG


def plural_suffix(lang: str, count: int) -> str:
    n = abs(int(count))
    if lang == "ru":
        if n % 10 == 1 and n % 100 != 11:
            return "_ONE"
        if 2 <= n % 10 <= 4 and not 12 <= n % 100 <= 14:
            return "_FEW"
        return ""
    return "_ONE" if n == 1 else ""


def _template(key: str, lang: str) -> str:
    pack = LANG_PACK.get(lang) or LANG_PACK[BASE_LANG]
    return pack.get(key) or LANG_PACK[BASE_LANG].get(key, key)


def _render(template: str, key: str, kwargs: Dict[str, object]) -> str:
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError) as exc:
        logger.debug("message %s not formatted: %s", key, exc)
        return template


def translate(key: str, lang: Optional[str] = None, **kwargs) -> str:
    return _render(_template(key, effective_lang(lang)), key, kwargs)


def translate_count(key: str, count: int, lang: Optional[str] = None, **kwargs) -> str:
    """Like `translate`, choosing the plural variant of `key` for `count`."""
    active = effective_lang(lang)
    variant = key + plural_suffix(active, count)
    pack = LANG_PACK.get(active) or LANG_PACK[BASE_LANG]
    chosen = variant if variant in pack else key
    return _render(_template(chosen, active), chosen, dict(kwargs, count=count))


__all__ = [
    "BASE_LANG",
    "LANG_ENV",
    "complete_packs",
    "effective_lang",
    "plural_suffix",
    "translate",
    "translate_count",
]
