"""
form-validation-lib: Rule-based validation for form and request data

This library provides:
- Declarative rules as strings ("required|email|max:100") or lists
- Custom rule objects and inline rule functions
- Ordered, multi-valued error bags
- Cross-field "after" hooks
- Inline message overrides and locale message catalogs
- Named forms loaded from configuration, with a JSON-RPC front end

Example:
    from form_validation import make

    validator = make(data, {"username": "required|email", "password": "required|min:6"})
    if validator.fails():
        print(validator.errors().to_json(indent=2))
"""

from .api import FormValidationService
from .errors import (
    ConfigurationError,
    FormValidationError,
    InvalidRuleParameterError,
    RuleExecutionError,
    UnknownRuleError,
    ValidationFailedError,
)
from .message_bag import MessageBag
from .messages import Translator, get_locale, set_locale
from .rule_registry import RuleRegistry, get_registry
from .rules import MISSING, DataAwareRule, RuleDefinition, ValidationRule, ValidatorAwareRule
from .validator import ValidationResult, Validator, make, validate

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "DataAwareRule",
    "FormValidationError",
    "FormValidationService",
    "InvalidRuleParameterError",
    "MISSING",
    "MessageBag",
    "RuleDefinition",
    "RuleExecutionError",
    "RuleRegistry",
    "Translator",
    "UnknownRuleError",
    "ValidationFailedError",
    "ValidationResult",
    "ValidationRule",
    "Validator",
    "ValidatorAwareRule",
    "get_locale",
    "get_registry",
    "make",
    "set_locale",
    "validate",
]
