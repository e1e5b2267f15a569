# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging
import os

from babel.messages import Catalog
from babel.messages.pofile import read_po

from fastresource.config import BaseSettings, get_settings
from fastresource.context import get_locale
from fastresource.dependencies import get_service, has_service, register_service


logger = logging.getLogger("fastresource.i18n")


class I18n:
    """Service for internationalization with multi-source support."""

    def __init__(self, settings: BaseSettings):
        self.settings = settings
        self._catalogs: dict[str, dict[str, Catalog]] = {}  # {path: {locale: catalog}}
        self._loaded_locales = set()

    def load_locale(self, locale: str) -> None:
        """Load translations for a specific locale from all sources."""
        if locale in self._loaded_locales:
            return

        for translations_path in self.settings.computed_translations_paths:
            po_file = os.path.join(translations_path, f"{locale}.po")

            if not os.path.exists(po_file):
                continue

            try:
                with open(po_file, "rb") as f:
                    catalog = read_po(f, locale=locale)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not load {po_file}: {e}")
                continue

            self._catalogs.setdefault(translations_path, {})[locale] = catalog

        self._loaded_locales.add(locale)

    def translate(self, message: str, locale: str | None = None, **kwargs) -> str:
        """Translate a message using the given or current locale with priority-based lookup."""
        locale = locale or get_locale()
        self.load_locale(locale)

        for path in reversed(self.settings.computed_translations_paths):
            catalog = self._catalogs.get(path, {}).get(locale)

            if catalog is None or message not in catalog:
                continue

            msg_obj = catalog[message]
            translated = msg_obj.string[0] if isinstance(msg_obj.string, (list, tuple)) else msg_obj.string

            if translated and isinstance(translated, str):
                try:
                    return translated.format(**kwargs) if kwargs else translated
                except KeyError:
                    break

        try:
            return message.format(**kwargs) if kwargs else message
        except KeyError:
            return message

    _ = translate

    def get_available_locales(self) -> list[str]:
        """Get list of available locales based on existing .po files."""
        available = set()

        for translations_path in self.settings.computed_translations_paths:
            if not os.path.exists(translations_path):
                continue

            for filename in os.listdir(translations_path):
                if filename.endswith(".po"):
                    available.add(filename[:-3])

        return sorted(available)

    def clear_cache(self) -> None:
        """Clear translation cache."""
        self._catalogs.clear()
        self._loaded_locales.clear()


class TranslatableString(str):
    """
    String translated lazily, each time it is rendered.

    Exceptions keep their messages as translatable strings so the locale
    used is the one active when the message is displayed.
    """

    def __new__(cls, message: str, **kwargs):
        instance = super().__new__(cls, message)
        instance.message = message
        instance.params = kwargs

        return instance

    def __str__(self) -> str:
        return get_i18n().translate(self.message, **self.params)

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)

    def __repr__(self) -> str:
        return f"TranslatableString({self.message!r})"


def get_i18n() -> I18n:
    if not has_service(I18n):
        register_service(I18n(get_settings()))

    return get_service(I18n)


__all__ = [
    "I18n",
    "TranslatableString",
    "get_i18n",
]
