"""
Rule Registry - name to rule definition mapping

Rule strings such as ``"required|min:6"`` are resolved against a registry.
A single process-wide registry holding the built-in rules is created lazily
by ``get_registry()``; applications add their own rules to it at start-up:

```python
from form_validation.rule_registry import get_registry

def starts_with(attribute, value, params, validator):
    return str(value).startswith(params[0])

get_registry().extend("starts_with", starts_with, ":attribute must start with :0")
```

The registry is read-mostly: mutate it before validations start, not while
they run on other threads. Tests call ``reset_registry()`` to start clean.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .errors import UnknownRuleError
from .rules.base import BuiltinRule, RuleDefinition
from .rules.builtin import BUILTIN_RULES

logger = logging.getLogger(__name__)


class CallbackRule(RuleDefinition):
    """Rule definition wrapping a plain ``check(attribute, value, params, validator)`` function."""

    def __init__(self, check: Callable[..., bool], message: Optional[str] = None,
                 implicit: bool = False):
        self.check = check
        self.default_message = message
        self.implicit = implicit

    def passes(self, attribute, value, params, validator) -> bool:
        return bool(self.check(attribute, value, params, validator))

    def replacements(self, attribute, params, validator) -> Dict[str, Any]:
        # positional placeholders :0, :1, ...
        return {str(i): p for i, p in enumerate(params)}


class RuleRegistry:
    """Maps rule names to ``RuleDefinition`` instances."""

    def __init__(self):
        self._definitions: Dict[str, RuleDefinition] = {}

    @classmethod
    def with_builtins(cls) -> "RuleRegistry":
        """Create a registry pre-populated with the built-in rules."""
        registry = cls()
        for definition_class in BUILTIN_RULES:
            registry.register(definition_class.name, definition_class)
        return registry

    def register(self, name: str, definition: Union[RuleDefinition, type]) -> None:
        """
        Register a rule definition under ``name``, replacing any previous one.

        Args:
            name: Rule name used in rule strings (must not contain "|" or ":")
            definition: RuleDefinition instance, or subclass instantiated without arguments

        Raises:
            ValueError: If the name is empty or contains a separator
            TypeError: If definition is not a RuleDefinition
        """
        if not name or "|" in name or ":" in name:
            raise ValueError(f"Invalid rule name: {name!r}")

        if isinstance(definition, type):
            definition = definition()
        if not isinstance(definition, RuleDefinition):
            raise TypeError(
                f"Rule {name!r} must be a RuleDefinition, got {type(definition).__name__}"
            )

        definition.name = name
        self._definitions[name] = definition
        logger.debug("Registered validation rule", extra={"rule_name": name})

    def extend(self, name: str, check: Callable[..., bool], message: Optional[str] = None,
               implicit: bool = False) -> None:
        """Register a plain function as a rule, with an optional default message."""
        self.register(name, CallbackRule(check, message=message, implicit=implicit))

    def get(self, name: str) -> RuleDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise UnknownRuleError(name) from None

    def resolve(self, name: str, params: Sequence[Any] = ()) -> BuiltinRule:
        """
        Build a rule instance for ``name`` with normalized parameters.

        Raises:
            UnknownRuleError: If name is not registered
            InvalidRuleParameterError: If the definition rejects the parameters
        """
        definition = self.get(name)
        return BuiltinRule(name, definition.normalize_params(list(params)), definition)

    def has(self, name: str) -> bool:
        return name in self._definitions

    def names(self) -> List[str]:
        return list(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions


_registry: Optional[RuleRegistry] = None


def get_registry() -> RuleRegistry:
    """Get or initialize the process-wide registry."""
    global _registry
    if _registry is None:
        _registry = RuleRegistry.with_builtins()
    return _registry


def reset_registry() -> None:
    """Discard the process-wide registry (for testing)."""
    global _registry
    _registry = None
