"""
Rule building blocks.

Two extension points live here:

- ``RuleDefinition``: a named, parameterizable check registered in the
  ``RuleRegistry`` and referenced from rule strings (``"min:6"``).
- ``ValidationRule``: an abstract base class for custom rule objects passed
  directly in a field's rule list (``["required", Uppercase()]``).

The parser turns every declaration into one of the ``RuleInstance``
variants below, so the validator never inspects raw declarations while
running.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

# fail(message) callback handed to custom rules
FailCallback = Callable[[str], None]


class _Missing:
    """Sentinel type for a field that is absent from the input data."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class RuleDefinition(ABC):
    """
    Abstract base class for registry rules.

    The registry assigns ``name`` at registration time. Subclasses implement
    ``passes()``; everything else has a sensible default.
    """

    name: str = ""

    # Implicit rules run even when the value is absent (e.g. "required").
    implicit: bool = False

    # Meta rules change how a field's rules run and never check the value.
    meta: bool = False

    # Fallback template when no inline message or catalog entry exists.
    default_message: Optional[str] = None

    def normalize_params(self, params: Sequence[Any]) -> Tuple[Any, ...]:
        """
        Validate and normalize declared parameters at parse time.

        Raises:
            InvalidRuleParameterError: If the parameters are unusable
        """
        return tuple(params)

    @abstractmethod
    def passes(self, attribute: str, value: Any, params: Tuple[Any, ...], validator) -> bool:
        """Return True when ``value`` satisfies the rule."""

    def replacements(self, attribute: str, params: Tuple[Any, ...], validator) -> Dict[str, Any]:
        """Placeholder values (without the leading colon) for the failure message."""
        return {}

    def message_variant(self, attribute: str, value: Any, validator) -> Optional[str]:
        """
        Catalog sub-key to pick when the catalog entry is a mapping
        (e.g. "numeric", "string", "array" for size rules).
        """
        return None


class ValidationRule(ABC):
    """
    Abstract base class for custom rule objects.

    The validator calls ``validate(attribute, value, fail)``; the rule calls
    ``fail(message)`` once per problem it finds. ``:attribute`` in the message
    is replaced with the field's display name.

    Rule objects may keep state between calls. The engine only reuses an
    instance when the caller passes the same instance again.
    """

    # Set to True to run the rule even when the field is absent or blank.
    implicit: bool = False

    @abstractmethod
    def validate(self, attribute: str, value: Any, fail: FailCallback) -> None:
        """Check ``value`` and call ``fail`` for every violation."""


class DataAwareRule(ABC):
    """Mixin for rule objects that need the whole input data."""

    @abstractmethod
    def set_data(self, data) -> None:
        """Receive the (read-only) input data before ``validate`` is called."""


class ValidatorAwareRule(ABC):
    """Mixin for rule objects that need the running validator."""

    @abstractmethod
    def set_validator(self, validator) -> None:
        """Receive the validator before ``validate`` is called."""


@dataclass(frozen=True)
class BuiltinRule:
    """A registry rule with its declared parameters."""

    name: str
    params: Tuple[Any, ...] = ()
    definition: Optional[RuleDefinition] = field(default=None, compare=False, repr=False)

    @property
    def implicit(self) -> bool:
        return bool(self.definition and self.definition.implicit)

    @property
    def meta(self) -> bool:
        return bool(self.definition and self.definition.meta)


@dataclass(frozen=True)
class ObjectRule:
    """A custom rule object exposing ``validate(attribute, value, fail)``."""

    rule: Any

    @property
    def implicit(self) -> bool:
        return bool(getattr(self.rule, "implicit", False))

    @property
    def name(self) -> str:
        return type(self.rule).__name__


@dataclass(frozen=True)
class FunctionRule:
    """An inline callable ``(attribute, value, fail)``."""

    callback: Callable[[str, Any, FailCallback], None]
    implicit = False

    @property
    def name(self) -> str:
        return getattr(self.callback, "__name__", "<function>")


RuleInstance = Union[BuiltinRule, ObjectRule, FunctionRule]
