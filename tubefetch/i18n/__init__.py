import json
import logging
import os
from typing import Any, Dict, Optional

from tubefetch.config.settings import config

logger = logging.getLogger(__name__)

LOCALES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "locales")


def _lookup(messages: Dict[str, Any], key: str) -> Optional[str]:
    """Resolve a dotted key such as "error.invalid_url"; None when absent"""
    node: Any = messages
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


class I18n:
    """Client-facing messages per locale, falling back to the default locale"""

    def __init__(self, locales_dir: str = LOCALES_DIR, default_locale: str = config.i18n.default_locale):
        self.default_locale = default_locale
        self.catalogs: Dict[str, Dict[str, Any]] = self._load(locales_dir)

    @staticmethod
    def _load(locales_dir: str) -> Dict[str, Dict[str, Any]]:
        catalogs: Dict[str, Dict[str, Any]] = {}
        if not os.path.isdir(locales_dir):
            logger.warning(f"Locales directory not found at {locales_dir}")
            return catalogs

        for filename in sorted(os.listdir(locales_dir)):
            locale, ext = os.path.splitext(filename)
            if ext != ".json":
                continue
            try:
                with open(os.path.join(locales_dir, filename), encoding="utf-8") as f:
                    catalogs[locale] = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Error loading locale {locale}: {e}")
        return catalogs

    def get(self, key: str, locale: Optional[str] = None, **kwargs) -> str:
        """Message for key in locale, else the default locale, else the key itself"""
        message = None
        for candidate in (locale, self.default_locale):
            if candidate in self.catalogs:
                message = _lookup(self.catalogs[candidate], key)
                if message is not None:
                    break

        if message is None:
            return key
        try:
            return message.format(**kwargs)
        except KeyError:
            return message


i18n = I18n()
