"""Exception taxonomy for form-validation-lib."""

from typing import Any, Optional, Sequence


class FormValidationError(Exception):
    """Base class for every error raised by this library."""


class UnknownRuleError(FormValidationError):
    """A rule declaration references a name the registry does not know."""

    def __init__(self, rule_name: str):
        self.rule_name = rule_name
        super().__init__(f"Unknown validation rule: {rule_name!r}")


class InvalidRuleParameterError(FormValidationError):
    """A rule was declared with parameters it cannot accept (e.g. ``min:abc``)."""

    def __init__(self, rule_name: str, params: Sequence[Any], reason: str):
        self.rule_name = rule_name
        self.params = tuple(params)
        self.reason = reason
        super().__init__(
            f"Invalid parameters {list(self.params)!r} for rule {rule_name!r}: {reason}"
        )


class RuleExecutionError(FormValidationError):
    """A custom rule object or inline function raised while validating a field."""

    def __init__(self, attribute: str, rule: Any, original: BaseException):
        self.attribute = attribute
        self.rule = rule
        self.original = original
        super().__init__(
            f"Rule {rule!r} raised while validating {attribute!r}: "
            f"{type(original).__name__}: {original}"
        )


class ValidationFailedError(FormValidationError):
    """
    Raised by ``Validator.validate()`` when the data violates its rules.

    Carries the originating validator and its error bag so callers can
    render or serialize the failures.
    """

    def __init__(self, validator: Any, message: Optional[str] = None):
        self.validator = validator
        self.errors = validator.errors()
        super().__init__(message or self._summarize(self.errors))

    @staticmethod
    def _summarize(errors) -> str:
        first = errors.first()
        if first is None:
            return "The given data was invalid."
        remaining = errors.count() - 1
        if remaining <= 0:
            return first
        noun = "error" if remaining == 1 else "errors"
        return f"{first} (and {remaining} more {noun})"


class ConfigurationError(FormValidationError):
    """Configuration or form definitions could not be loaded or are invalid."""
