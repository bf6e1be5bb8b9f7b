"""
Validator - runs parsed rules against one data snapshot

Example:
    from form_validation import make

    validator = make(
        {"username": "admin@example.com", "password": "secret"},
        {"username": "required|email|max:100", "password": ["required", "min:6"]},
    )
    validator.after(lambda v: ...)   # cross-field checks

    if validator.fails():
        print(validator.errors().to_json(indent=2))

    data = validator.validate()      # raises ValidationFailedError when invalid
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import FormValidationError, RuleExecutionError, ValidationFailedError
from .message_bag import MessageBag
from .messages import Translator, format_message, get_translator, pick_variant
from .rule_parser import parse_rules
from .rule_registry import RuleRegistry, get_registry
from .rules.base import MISSING, BuiltinRule, FunctionRule, ObjectRule, RuleInstance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one validation run.

    The result is falsy when validation failed, so callers can write
    ``if not result: ...``. ``validated_data`` holds the declared fields
    present in the input, and is empty when validation failed.
    """

    passed: bool
    errors: MessageBag
    validated_data: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.passed


class Validator:
    """Validates one input snapshot against per-field rules."""

    def __init__(
        self,
        data: Mapping,
        rules: Mapping,
        messages: Optional[Mapping[str, Any]] = None,
        attributes: Optional[Mapping[str, str]] = None,
        locale: Optional[str] = None,
        registry: Optional[RuleRegistry] = None,
        translator: Optional[Translator] = None,
    ):
        """
        Initialize a validator and parse its rules.

        Args:
            data: Input data (field name -> value); snapshotted read-only
            rules: Field name -> rule declaration (string, list, object or function)
            messages: Inline templates keyed by "rule" or "field.rule"
            attributes: Display names for fields, used for ":attribute"
            locale: Locale for catalog messages; defaults to the process-wide locale
            registry: Rule registry; defaults to the process-wide registry
            translator: Message catalogs; defaults to the process-wide translator

        Raises:
            UnknownRuleError: If a rule name is not registered
            InvalidRuleParameterError: If a rule rejects its parameters
            TypeError: If data or rules have an unsupported shape
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Data must be a mapping, got {type(data).__name__}")

        self._data = MappingProxyType(dict(data))
        self._registry = registry or get_registry()
        self._rules: Dict[str, List[RuleInstance]] = parse_rules(rules, self._registry)
        self._custom_messages = dict(messages or {})
        self._custom_attributes = dict(attributes or {})
        self._translator = translator
        self.locale = locale
        self._after_hooks: List[Callable[["Validator"], None]] = []
        self._errors: Optional[MessageBag] = None

    @property
    def translator(self) -> Translator:
        if self._translator is None:
            self._translator = get_translator()
        return self._translator

    # Context available to rules and after-hooks

    def get_data(self) -> Mapping:
        return self._data

    def get_rules(self) -> Dict[str, List[RuleInstance]]:
        return {attribute: list(rules) for attribute, rules in self._rules.items()}

    def get_value(self, attribute: str) -> Any:
        """Value of a field, or MISSING when the field is absent."""
        return self._data.get(attribute, MISSING)

    def has_rule(self, attribute: str, names: Iterable[str]) -> bool:
        """True if the field declares any of the named registry rules."""
        names = set(names)
        return any(
            isinstance(rule, BuiltinRule) and rule.name in names
            for rule in self._rules.get(attribute, ())
        )

    def display_name(self, attribute: str) -> str:
        """Name substituted for ":attribute" in messages."""
        if attribute in self._custom_attributes:
            return self._custom_attributes[attribute]
        translated = self.translator.attribute(attribute, self.locale)
        if translated is not None:
            return translated
        return attribute.replace("_", " ")

    # Entry points

    def after(self, hook: Callable[["Validator"], None]) -> "Validator":
        """
        Register a callback run after every per-field rule.

        The hook receives this validator and may add messages through
        ``validator.errors().add(field, message)``.
        """
        self._after_hooks.append(hook)
        return self

    def passes(self) -> bool:
        """Run the full pipeline and report whether the data is valid."""
        self._run()
        return self._errors.is_empty()

    def fails(self) -> bool:
        return not self.passes()

    def errors(self) -> MessageBag:
        """Error bag of the latest run (runs once if validation has not run yet)."""
        if self._errors is None:
            self._run()
        return self._errors

    def validate(self) -> Dict[str, Any]:
        """
        Run the pipeline and return the validated data.

        Returns:
            Dict with only the declared fields present in the input

        Raises:
            ValidationFailedError: If any rule or after-hook reported an error
        """
        if self.fails():
            raise ValidationFailedError(self)
        return self._validated_data()

    def validated(self) -> Dict[str, Any]:
        """Validated data from the latest run, running first if needed."""
        if self.errors():
            raise ValidationFailedError(self)
        return self._validated_data()

    def run(self) -> ValidationResult:
        """Run the pipeline and return a ValidationResult instead of raising."""
        passed = self.passes()
        return ValidationResult(
            passed=passed,
            errors=self._errors,
            validated_data=self._validated_data() if passed else {},
        )

    # Pipeline

    def _run(self) -> None:
        self._errors = MessageBag()

        for attribute, rules in self._rules.items():
            self._validate_attribute(attribute, rules)

        for hook in self._after_hooks:
            hook(self)

        logger.debug(
            "Validation run finished",
            extra={
                "field_count": len(self._rules),
                "error_count": self._errors.count(),
                "failed_fields": self._errors.keys(),
            },
        )

    def _validate_attribute(self, attribute: str, rules: List[RuleInstance]) -> None:
        value = self.get_value(attribute)
        bail = self.has_rule(attribute, ("bail",))
        nullable = self.has_rule(attribute, ("nullable",))

        for rule in rules:
            if isinstance(rule, BuiltinRule) and rule.meta:
                continue
            if not self._is_validatable(rule, value, nullable):
                continue

            failed = self._apply(attribute, value, rule)

            # A failed presence rule makes the field's other messages noise.
            if failed and (bail or (isinstance(rule, BuiltinRule) and rule.implicit)):
                break

    def _is_validatable(self, rule: RuleInstance, value: Any, nullable: bool) -> bool:
        if rule.implicit:
            return True
        if value is MISSING:
            return False
        if isinstance(value, str) and value.strip() == "":
            return False
        if value is None and nullable:
            return False
        return True

    def _apply(self, attribute: str, value: Any, rule: RuleInstance) -> bool:
        """Run one rule; return True when it reported a failure."""
        try:
            if isinstance(rule, BuiltinRule):
                if rule.definition.passes(attribute, value, rule.params, self):
                    return False
                self._errors.add(attribute, self._message_for(attribute, value, rule))
                return True

            before = len(self._errors.get(attribute))
            fail = self._fail_callback(attribute)

            if isinstance(rule, ObjectRule):
                target = rule.rule
                if callable(getattr(target, "set_data", None)):
                    target.set_data(self._data)
                if callable(getattr(target, "set_validator", None)):
                    target.set_validator(self)
                target.validate(attribute, value, fail)
            elif isinstance(rule, FunctionRule):
                rule.callback(attribute, value, fail)

            return len(self._errors.get(attribute)) > before
        except FormValidationError:
            raise
        except Exception as e:
            raise RuleExecutionError(attribute, rule, e) from e

    def _fail_callback(self, attribute: str) -> Callable[[str], None]:
        def fail(message: str) -> None:
            self._errors.add(
                attribute,
                format_message(str(message), {"attribute": self.display_name(attribute)}),
            )

        return fail

    def _message_for(self, attribute: str, value: Any, rule: BuiltinRule) -> str:
        """
        Resolve and render the failure message for a registry rule.

        Precedence: inline "field.rule" > inline "rule" > locale catalog >
        the definition's default > the literal key "validation.<rule>".
        """
        definition = rule.definition
        variant = definition.message_variant(attribute, value, self)

        template = (
            pick_variant(self._custom_messages.get(f"{attribute}.{rule.name}"), variant)
            or pick_variant(self._custom_messages.get(rule.name), variant)
            or self.translator.template(rule.name, self.locale, variant)
            or definition.default_message
            or f"validation.{rule.name}"
        )

        replacements = {"attribute": self.display_name(attribute)}
        replacements.update(definition.replacements(attribute, rule.params, self))
        return format_message(template, replacements)

    def _validated_data(self) -> Dict[str, Any]:
        return {attribute: self._data[attribute] for attribute in self._rules if attribute in self._data}


def make(data: Mapping, rules: Mapping, messages: Optional[Mapping[str, Any]] = None,
         attributes: Optional[Mapping[str, str]] = None, **options) -> Validator:
    """Create a Validator (options: locale, registry, translator)."""
    return Validator(data, rules, messages, attributes, **options)


def validate(data: Mapping, rules: Mapping, messages: Optional[Mapping[str, Any]] = None,
             attributes: Optional[Mapping[str, str]] = None, **options) -> ValidationResult:
    """Validate data in one call and return a ValidationResult."""
    return make(data, rules, messages, attributes, **options).run()
