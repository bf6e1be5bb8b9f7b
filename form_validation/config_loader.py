"""Configuration loading: bundled local config, message catalogs and form definitions."""

import hashlib
import logging
import os
import urllib.parse
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import requests
import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

RULE_LIST_SCHEMA = {
    "anyOf": [
        {"type": "string"},
        {"type": "array", "items": {"type": "string"}},
    ]
}

STRING_MAP_SCHEMA = {"type": "object", "additionalProperties": {"type": "string"}}

FORMS_SCHEMA = {
    "type": "object",
    "required": ["forms"],
    "properties": {
        "custom_rules": {
            "type": "object",
            "additionalProperties": {
                "type": "string",
                "pattern": r"^[A-Za-z_][A-Za-z0-9_.]*\.[A-Za-z_][A-Za-z0-9_]*$",
            },
        },
        "forms": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["rules"],
                "properties": {
                    "description": {"type": "string"},
                    "rules": {"type": "object", "additionalProperties": RULE_LIST_SCHEMA},
                    "messages": STRING_MAP_SCHEMA,
                    "attributes": STRING_MAP_SCHEMA,
                },
                "additionalProperties": False,
            },
        },
    },
}

CATALOG_SCHEMA = {
    "type": "object",
    "required": ["locale"],
    "properties": {
        "locale": {"type": "string", "minLength": 1},
        "messages": {
            "type": "object",
            "additionalProperties": {
                "anyOf": [{"type": "string"}, STRING_MAP_SCHEMA],
            },
        },
        "attributes": STRING_MAP_SCHEMA,
    },
}


class ConfigLoader:
    """
    Loads the local configuration and the documents it points at.

    The local config is the bundled ``local-config.yaml`` unless a path is
    given explicitly or through the ``FORM_VALIDATION_CONFIG`` environment
    variable.
    """

    CACHE_DIR = Path.home() / ".cache" / "form-validation-lib"
    ENV_VAR = "FORM_VALIDATION_CONFIG"

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to a local config file overriding the bundled one

        Raises:
            ConfigurationError: If the local config cannot be read or parsed
        """
        config_path = config_path or os.environ.get(self.ENV_VAR)
        if config_path:
            self.local_config_path = str(Path(config_path).resolve())
        else:
            self.local_config_path = str(files("form_validation").joinpath("local-config.yaml"))

        self.cache_dir = self.CACHE_DIR
        self.local_config = self._load_yaml(self.local_config_path) or {}
        if not isinstance(self.local_config, dict):
            raise ConfigurationError(
                f"Local config must be a mapping: {self.local_config_path}"
            )

        logger.debug("Local config loaded", extra={"config_path": self.local_config_path})

    def get_local_config(self) -> Dict[str, Any]:
        return self.local_config

    def get_default_locale(self) -> str:
        return self.local_config.get("default_locale", "en")

    def get_fallback_locale(self) -> str:
        return self.local_config.get("fallback_locale", self.get_default_locale())

    def get_fetch_timeout(self) -> float:
        return float(self.local_config.get("remote_fetch_timeout_seconds", 10))

    def clear_cache(self) -> None:
        """
        Delete cached remote documents.

        Used by FormValidationService.reload_config() to force a fresh fetch.
        """
        if not self.cache_dir.exists():
            return
        for cache_path in self.cache_dir.glob("config_*.yaml"):
            cache_path.unlink()
        logger.debug("Remote config cache cleared", extra={"cache_dir": str(self.cache_dir)})

    def load_catalogs(self) -> List[Dict[str, Any]]:
        """
        Load every message catalog listed under ``message_catalogs``.

        Raises:
            ConfigurationError: If a catalog cannot be loaded or fails schema validation
        """
        catalogs = []
        for uri in self.local_config.get("message_catalogs", []):
            catalog = self._load_config_from_uri(uri)
            self._check_schema(catalog, CATALOG_SCHEMA, uri)
            catalogs.append(catalog)
        return catalogs

    def load_forms_config(self) -> Dict[str, Any]:
        """
        Load the named form definitions from ``forms_config_uri``.

        Returns:
            Dict with "forms" and "custom_rules" sections (empty when not configured)

        Raises:
            ConfigurationError: If the document cannot be loaded or fails schema validation
        """
        uri = self.local_config.get("forms_config_uri")
        if not uri:
            return {"forms": {}, "custom_rules": {}}

        forms_config = self._load_config_from_uri(uri)
        self._check_schema(forms_config, FORMS_SCHEMA, uri)
        forms_config.setdefault("custom_rules", {})
        logger.info(
            "Form definitions loaded",
            extra={"forms_uri": uri, "form_count": len(forms_config["forms"])},
        )
        return forms_config

    def _check_schema(self, document: Any, schema: Dict[str, Any], uri: str) -> None:
        try:
            jsonschema.validate(instance=document, schema=schema)
        except jsonschema.ValidationError as e:
            error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
            raise ConfigurationError(
                f"Invalid configuration in {uri} at {error_path}: {e.message}"
            ) from e

    def _load_yaml(self, path: str) -> Any:
        """Load YAML file from disk."""
        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config file {path}: {e}") from e

    def _load_config_from_uri(self, uri: str) -> Any:
        """
        Load a YAML document from a URI (with caching for remote documents).

        Supports:
        - Relative paths - resolved against the local config directory
        - file:// - Local filesystem (absolute paths)
        - https:// / http:// - Remote, cached by SHA-256 of the URI

        Args:
            uri: Document URI or relative path

        Returns:
            Parsed YAML document
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme:
            config_dir = os.path.dirname(os.path.abspath(self.local_config_path))
            return self._load_yaml(os.path.join(config_dir, uri))

        if parsed.scheme == "file":
            return self._load_yaml(urllib.parse.unquote(parsed.path))

        if parsed.scheme in ("http", "https"):
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            cache_path = self.cache_dir / f"config_{cache_key}.yaml"

            if cache_path.exists():
                return self._load_yaml(str(cache_path))

            content = self._fetch_uri(uri)
            try:
                document = yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse config from {uri}: {e}") from e
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(content, encoding="utf-8")
            return document

        raise ConfigurationError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            response = requests.get(uri, timeout=self.get_fetch_timeout())
            response.raise_for_status()
        except requests.RequestException as e:
            raise ConfigurationError(f"Failed to fetch config from {uri}: {e}") from e
        logger.info("Remote config fetched", extra={"uri": uri})
        return response.text
