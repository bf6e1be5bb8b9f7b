"""
Rule declaration parsing.

Accepted per-field declarations:

- a pipe-delimited string: ``"required|min:6|max:20"``
- a list mixing rule strings (``"min:6"``), ``(name, *params)`` tuples,
  rule objects (anything with a callable ``validate``) and inline functions
  ``(attribute, value, fail)``
- a single rule object or function

Every declaration becomes an ordered list of ``RuleInstance`` values. Rule
names are resolved against the registry here, so unknown names and bad
parameters fail before any data is validated. Parsing has no side effects.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

from .rule_registry import RuleRegistry, get_registry
from .rules.base import BuiltinRule, FunctionRule, ObjectRule, RuleInstance


def parse_token(token: str) -> Tuple[str, List[str]]:
    """
    Split a single rule token into its name and parameters.

    Example: "in:a, b,c" -> ("in", ["a", "b", "c"])
    """
    name, _, rest = token.partition(":")
    params = [p.strip() for p in rest.split(",")] if rest.strip() else []
    return name.strip(), params


def parse_field_rules(declaration: Any, registry: Optional[RuleRegistry] = None) -> List[RuleInstance]:
    """
    Parse one field's rule declaration into an ordered list of rule instances.

    Raises:
        UnknownRuleError: If a rule name is not registered
        InvalidRuleParameterError: If a rule rejects its parameters
        TypeError: If an element is not a supported rule declaration
    """
    registry = registry or get_registry()

    if isinstance(declaration, str):
        return [
            registry.resolve(*parse_token(token))
            for token in declaration.split("|")
            if token.strip()
        ]

    if isinstance(declaration, (list, tuple)):
        rules = []
        for element in declaration:
            rule = _parse_element(element, registry)
            if rule is not None:
                rules.append(rule)
        return rules

    if declaration is None:
        return []

    return [_parse_element(declaration, registry)]


def parse_rules(rules: Mapping, registry: Optional[RuleRegistry] = None) -> Dict[str, List[RuleInstance]]:
    """Parse a field -> declaration mapping, preserving field order."""
    if not isinstance(rules, Mapping):
        raise TypeError(f"Rules must be a mapping of field name to rules, got {type(rules).__name__}")
    registry = registry or get_registry()
    return {field: parse_field_rules(declaration, registry) for field, declaration in rules.items()}


def _parse_element(element: Any, registry: RuleRegistry) -> Optional[RuleInstance]:
    if isinstance(element, (BuiltinRule, ObjectRule, FunctionRule)):
        return element

    if isinstance(element, str):
        if not element.strip():
            return None
        return registry.resolve(*parse_token(element))

    if isinstance(element, tuple):
        if not element or not isinstance(element[0], str):
            raise TypeError(f"Rule tuples must start with the rule name, got {element!r}")
        return registry.resolve(element[0].strip(), list(element[1:]))

    if isinstance(element, type):
        raise TypeError(
            f"Rule classes must be instantiated before use: pass {element.__name__}() "
            f"instead of {element.__name__}"
        )

    if callable(getattr(element, "validate", None)):
        return ObjectRule(element)

    if callable(element):
        return FunctionRule(element)

    raise TypeError(f"Unsupported rule declaration: {element!r}")
