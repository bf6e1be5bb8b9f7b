"""
Public API for form-validation-lib

This is the "front door" for applications that validate named forms defined
in configuration, and for ad-hoc rule sets that should share the service's
locale and message catalogs.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from .config_loader import ConfigLoader
from .messages import Translator
from .rule_loader import RuleLoader
from .rule_registry import get_registry
from .validator import ValidationResult, Validator

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_BAD_REQUEST = 400


class FormValidationService:
    """
    Main form validation service class.

    Loads the local configuration, message catalogs and form definitions once,
    then validates submissions against them.

    Example:
        from form_validation import FormValidationService

        service = FormValidationService()
        response = service.submit("login", {"username": "", "password": ""})
        # {"status": 400, "errors": {"username": [...], "password": [...]}}

        service.set_locale("id")
        result = service.validate(data, {"password": "required|min:6"})
        if not result:
            print(result.errors.to_json(indent=2))
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize validation service.

        Args:
            config_path: Optional local config file overriding the bundled local-config.yaml

        Raises:
            ConfigurationError: If config, catalogs, forms or custom rule classes fail to load
        """
        self._config_path = config_path
        self._initialize()

    def _initialize(self):
        """Internal initialization logic (used by __init__ and reload_config)."""
        self.config_loader = ConfigLoader(self._config_path)
        self.translator = Translator.from_config(self.config_loader)
        self.registry = get_registry()

        forms_config = self.config_loader.load_forms_config()
        self.forms: Dict[str, Dict[str, Any]] = forms_config["forms"]
        self.rule_loader = RuleLoader(forms_config["custom_rules"])
        self.rule_loader.load_all()

        self.locale: Optional[str] = None

        logger.info(
            "Form validation service initialized",
            extra={
                "forms": sorted(self.forms),
                "locales": self.translator.locales(),
                "default_locale": self.translator.default_locale,
            },
        )

    def make_validator(self, data: Mapping, rules: Mapping,
                       messages: Optional[Mapping[str, Any]] = None,
                       attributes: Optional[Mapping[str, str]] = None,
                       locale: Optional[str] = None) -> Validator:
        """Create a Validator bound to this service's registry, catalogs and locale."""
        return Validator(
            data,
            rules,
            messages,
            attributes,
            locale=locale or self.locale,
            registry=self.registry,
            translator=self.translator,
        )

    def validate(self, data: Mapping, rules: Mapping,
                 messages: Optional[Mapping[str, Any]] = None,
                 attributes: Optional[Mapping[str, str]] = None,
                 locale: Optional[str] = None) -> ValidationResult:
        """
        Validate data against ad-hoc rules.

        Args:
            data: Input data (field name -> value)
            rules: Field name -> rule declaration
            messages: Inline templates keyed by "rule" or "field.rule"
            attributes: Display names for fields
            locale: Locale for catalog messages (defaults to the service locale)

        Returns:
            ValidationResult with passed flag, error bag and validated data

        Raises:
            UnknownRuleError: If a rule name is not registered
            InvalidRuleParameterError: If a rule rejects its parameters
        """
        return self.make_validator(data, rules, messages, attributes, locale).run()

    def validate_form(self, form_name: str, data: Mapping,
                      locale: Optional[str] = None) -> ValidationResult:
        """
        Validate data against a named form definition.

        Raises:
            ValueError: If the form is not defined
        """
        form = self._get_form(form_name)
        rules = self.rule_loader.load_form_rules(form["rules"])
        return self.validate(
            data,
            rules,
            messages=form.get("messages"),
            attributes=form.get("attributes"),
            locale=locale,
        )

    def submit(self, form_name: str, data: Mapping, locale: Optional[str] = None) -> Dict[str, Any]:
        """
        Validate a form submission and map the outcome to an HTTP-style response.

        Returns:
            {"status": 200, "data": {...validated fields...}} when valid, or
            {"status": 400, "errors": {field: [messages]}} when invalid

        Example:
            service.submit("login", {"username": "admin", "password": "rahasia"})
            # {"status": 200, "data": {"username": "admin", "password": "rahasia"}}
        """
        result = self.validate_form(form_name, data, locale)

        if not result:
            errors = result.errors.to_structured()
            logger.info(
                "Form submission rejected",
                extra={"form": form_name, "errors": errors},
            )
            return {"status": HTTP_BAD_REQUEST, "errors": errors}

        logger.debug("Form submission accepted", extra={"form": form_name})
        return {"status": HTTP_OK, "data": result.validated_data}

    def discover_forms(self) -> Dict[str, Dict[str, Any]]:
        """
        Describe the configured forms.

        Returns:
            Dict mapping form name to {description, fields, rules}
        """
        result = {}
        for name, form in self.forms.items():
            result[name] = {
                "description": form.get("description", ""),
                "fields": list(form["rules"]),
                "rules": dict(form["rules"]),
            }
        return result

    def discover_rules(self) -> Dict[str, Any]:
        """
        List rule names usable in declarations.

        Returns:
            {"builtin": [...registry names...], "custom": {name: dotted class path}}
        """
        return {
            "builtin": self.registry.names(),
            "custom": dict(self.rule_loader.custom_rules),
        }

    def set_locale(self, locale: Optional[str]) -> None:
        """
        Set the locale used by this service's validators (None restores the default).

        Raises:
            ValueError: If no catalog exists for the locale
        """
        if locale is not None and locale not in self.translator.locales():
            raise ValueError(
                f"Unknown locale {locale!r}; available: {', '.join(self.translator.locales())}"
            )
        self.locale = locale

    def get_locale(self) -> str:
        return self.locale or self.translator.default_locale

    def reload_config(self) -> None:
        """
        Reload configuration, catalogs and form definitions from source.

        Cached remote documents are discarded first so http(s) catalogs and
        forms are fetched again.
        """
        locale = self.locale
        self.config_loader.clear_cache()
        self._initialize()
        if locale in self.translator.locales():
            self.locale = locale

    def _get_form(self, form_name: str) -> Dict[str, Any]:
        form = self.forms.get(form_name)
        if form is None:
            raise ValueError(
                f"Unknown form {form_name!r}; available: {', '.join(sorted(self.forms))}"
            )
        return form
