"""Rule definitions, custom rule base classes and the parsed rule variants."""

from .base import (
    MISSING,
    BuiltinRule,
    DataAwareRule,
    FunctionRule,
    ObjectRule,
    RuleDefinition,
    RuleInstance,
    ValidationRule,
    ValidatorAwareRule,
)
from .builtin import BUILTIN_RULES
from .custom import RegistrationRule, Uppercase

__all__ = [
    "MISSING",
    "BUILTIN_RULES",
    "BuiltinRule",
    "DataAwareRule",
    "FunctionRule",
    "ObjectRule",
    "RegistrationRule",
    "RuleDefinition",
    "RuleInstance",
    "Uppercase",
    "ValidationRule",
    "ValidatorAwareRule",
]
