"""
Message templates, locale catalogs and placeholder substitution.

Default messages come from locale catalogs. The bundled catalogs
(``lang/en.yaml``, ``lang/id.yaml``) are listed in ``local-config.yaml`` and
loaded lazily by ``get_translator()``; more catalogs can be added at runtime
with ``Translator.add_catalog()``.

A catalog looks like::

    locale: id
    messages:
      required: ":attribute wajib diisi."
      min:
        numeric: ":attribute minimal bernilai :min."
        string: ":attribute minimal berisi :min karakter."
    attributes:
      email: alamat surel

The active locale is process-wide (``set_locale``); validators accept an
explicit ``locale=`` that takes precedence.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r":([A-Za-z0-9_]+)")


def format_message(template: str, replacements: Mapping) -> str:
    """
    Substitute ``:name`` placeholders in a template.

    ``:Name`` inserts the value with its first letter capitalized and
    ``:NAME`` inserts it upper-cased. Unknown placeholders are left as-is.

    Example:
        format_message(":Attribute minimal :min karakter", {"attribute": "password", "min": 6})
        -> "Password minimal 6 karakter"
    """
    def substitute(match):
        word = match.group(1)
        if word in replacements:
            return str(replacements[word])
        lowered = word.lower()
        if lowered in replacements:
            value = str(replacements[lowered])
            if word.isupper() and len(word) > 1:
                return value.upper()
            if word[0].isupper():
                return value[:1].upper() + value[1:]
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def pick_variant(template: Any, variant: Optional[str]) -> Optional[str]:
    """Return a plain template from a string or a variant mapping (numeric/string/array)."""
    if template is None or isinstance(template, str):
        return template
    if isinstance(template, Mapping):
        if variant and variant in template:
            return template[variant]
        if "string" in template:
            return template["string"]
        for value in template.values():
            return value
    return None


class Translator:
    """Holds message catalogs keyed by locale."""

    def __init__(self, default_locale: str = "en", fallback_locale: str = "en"):
        self.default_locale = default_locale
        self.fallback_locale = fallback_locale
        self._messages: Dict[str, Dict[str, Any]] = {}
        self._attributes: Dict[str, Dict[str, str]] = {}

    @classmethod
    def from_config(cls, config_loader) -> "Translator":
        """Build a translator from the catalogs listed in the local configuration."""
        translator = cls(
            default_locale=config_loader.get_default_locale(),
            fallback_locale=config_loader.get_fallback_locale(),
        )
        for catalog in config_loader.load_catalogs():
            translator.add_catalog(catalog["locale"], catalog)
        return translator

    def add_catalog(self, locale: str, catalog: Mapping) -> None:
        """
        Merge a catalog into the given locale; later entries win.

        Args:
            locale: Locale identifier (e.g. "en", "id")
            catalog: Mapping with optional "messages" and "attributes" sections
        """
        self._messages.setdefault(locale, {}).update(catalog.get("messages") or {})
        self._attributes.setdefault(locale, {}).update(catalog.get("attributes") or {})
        logger.debug(
            "Message catalog added",
            extra={"locale": locale, "message_count": len(catalog.get("messages") or {})},
        )

    def locales(self):
        return sorted(self._messages)

    def template(self, rule_name: str, locale: Optional[str] = None,
                 variant: Optional[str] = None) -> Optional[str]:
        """Look up a rule's default template in the locale, then the fallback locale."""
        for candidate in self._candidates(locale):
            entry = self._messages.get(candidate, {}).get(rule_name)
            if entry is not None:
                return pick_variant(entry, variant)
        return None

    def attribute(self, field: str, locale: Optional[str] = None) -> Optional[str]:
        """Look up a field's display name in the locale, then the fallback locale."""
        for candidate in self._candidates(locale):
            name = self._attributes.get(candidate, {}).get(field)
            if name is not None:
                return name
        return None

    def _candidates(self, locale: Optional[str]):
        primary = locale or _locale or self.default_locale
        if primary == self.fallback_locale:
            return (primary,)
        return (primary, self.fallback_locale)


_translator: Optional[Translator] = None
_locale: Optional[str] = None


def get_translator() -> Translator:
    """Get or initialize the process-wide translator from the bundled configuration."""
    global _translator
    if _translator is None:
        from .config_loader import ConfigLoader

        _translator = Translator.from_config(ConfigLoader())
    return _translator


def set_translator(translator: Optional[Translator]) -> None:
    """Replace the process-wide translator (None resets it to lazy loading)."""
    global _translator
    _translator = translator


def get_locale() -> str:
    """Active process-wide locale; defaults to the configured default locale."""
    if _locale is not None:
        return _locale
    return get_translator().default_locale


def set_locale(locale: Optional[str]) -> None:
    """Switch the process-wide locale (None restores the configured default)."""
    global _locale
    _locale = locale
    logger.debug("Active locale changed", extra={"locale": locale})
