"""
Built-in rule definitions.

Every class here is registered under its ``name`` by
``RuleRegistry.with_builtins()``. Default message templates live in the
locale catalogs (``lang/*.yaml``), not in the classes.
"""

import re
from abc import abstractmethod
from collections.abc import Mapping, Sized
from typing import Any, Dict, Optional, Sequence, Tuple

from ..errors import InvalidRuleParameterError
from .base import MISSING, RuleDefinition

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
NUMERIC_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_numeric_string(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return NUMERIC_PATTERN.match(value.strip()) is not None


def is_blank(value: Any) -> bool:
    """True for absent values, None, whitespace-only strings and empty collections."""
    if value is MISSING or value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _single_param(name: str, params: Sequence[Any]) -> Any:
    if len(params) != 1:
        raise InvalidRuleParameterError(name, params, "exactly one parameter is required")
    return params[0]


class Required(RuleDefinition):
    """The field must be present and not blank."""

    name = "required"
    implicit = True

    def passes(self, attribute, value, params, validator) -> bool:
        return not is_blank(value)


class Email(RuleDefinition):
    name = "email"

    def passes(self, attribute, value, params, validator) -> bool:
        return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


class Numeric(RuleDefinition):
    name = "numeric"

    def passes(self, attribute, value, params, validator) -> bool:
        return is_number(value) or is_numeric_string(value)


class Integer(RuleDefinition):
    name = "integer"

    def passes(self, attribute, value, params, validator) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        return isinstance(value, str) and INTEGER_PATTERN.match(value.strip()) is not None


class String(RuleDefinition):
    name = "string"

    def passes(self, attribute, value, params, validator) -> bool:
        return isinstance(value, str)


class SizeRule(RuleDefinition):
    """
    Base for rules comparing a value's size against one numeric parameter.

    Size is the number itself for numbers (and for numeric strings when the
    field also declares "numeric" or "integer"), the character count for
    strings and the item count for collections.
    """

    placeholder = ""

    def normalize_params(self, params: Sequence[Any]) -> Tuple[Any, ...]:
        raw = _single_param(self.name, params)
        try:
            number = float(raw)
        except (TypeError, ValueError):
            raise InvalidRuleParameterError(self.name, params, "parameter must be numeric")
        if number.is_integer():
            return (int(number),)
        return (number,)

    def get_size(self, attribute: str, value: Any, validator) -> Optional[float]:
        if is_number(value):
            return value
        if isinstance(value, str):
            if is_numeric_string(value) and validator.has_rule(attribute, ("numeric", "integer")):
                return float(value)
            return len(value)
        if isinstance(value, (Mapping, list, tuple, set, frozenset)):
            return len(value)
        return None

    def message_variant(self, attribute, value, validator) -> Optional[str]:
        if is_number(value):
            return "numeric"
        if isinstance(value, str):
            if is_numeric_string(value) and validator.has_rule(attribute, ("numeric", "integer")):
                return "numeric"
            return "string"
        if isinstance(value, (Mapping, list, tuple, set, frozenset)):
            return "array"
        return "string"

    def replacements(self, attribute, params, validator) -> Dict[str, Any]:
        return {self.placeholder: params[0]}

    @abstractmethod
    def compare(self, size: float, limit: float) -> bool:
        """Compare the measured size against the rule parameter."""

    def passes(self, attribute, value, params, validator) -> bool:
        size = self.get_size(attribute, value, validator)
        if size is None:
            return False
        return self.compare(size, params[0])


class Min(SizeRule):
    name = "min"
    placeholder = "min"

    def compare(self, size, limit) -> bool:
        return size >= limit


class Max(SizeRule):
    name = "max"
    placeholder = "max"

    def compare(self, size, limit) -> bool:
        return size <= limit


class In(RuleDefinition):
    """The value must be one of the listed options (compared as strings)."""

    name = "in"

    def normalize_params(self, params):
        if not params:
            raise InvalidRuleParameterError(self.name, params, "at least one option is required")
        return tuple(str(p) for p in params)

    def passes(self, attribute, value, params, validator) -> bool:
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return str(value) in params
        return False

    def replacements(self, attribute, params, validator):
        return {"values": ", ".join(params)}


class Same(RuleDefinition):
    """The value must equal the value of another field."""

    name = "same"

    def normalize_params(self, params):
        return (str(_single_param(self.name, params)),)

    def passes(self, attribute, value, params, validator) -> bool:
        return value == validator.get_value(params[0])

    def replacements(self, attribute, params, validator):
        return {"other": validator.display_name(params[0])}


class Different(RuleDefinition):
    """The value must differ from another field's value when that field is present."""

    name = "different"

    def normalize_params(self, params):
        return (str(_single_param(self.name, params)),)

    def passes(self, attribute, value, params, validator) -> bool:
        other = validator.get_value(params[0])
        return other is MISSING or value != other

    def replacements(self, attribute, params, validator):
        return {"other": validator.display_name(params[0])}


class Confirmed(RuleDefinition):
    """The value must match the ``<field>_confirmation`` field."""

    name = "confirmed"

    def passes(self, attribute, value, params, validator) -> bool:
        return value == validator.get_value(f"{attribute}_confirmation")


class Bail(RuleDefinition):
    """Stop running the field's rules after its first failure."""

    name = "bail"
    meta = True

    def passes(self, attribute, value, params, validator) -> bool:
        return True


class Nullable(RuleDefinition):
    """A None value skips the field's non-implicit rules."""

    name = "nullable"
    meta = True

    def passes(self, attribute, value, params, validator) -> bool:
        return True


BUILTIN_RULES = (
    Required,
    Email,
    Numeric,
    Integer,
    String,
    Min,
    Max,
    In,
    Same,
    Different,
    Confirmed,
    Bail,
    Nullable,
)
