"""
Rule Loader - custom rule classes for configured forms

Form definitions (``forms.yaml``) can only hold strings, so custom rule
objects are referenced by name:

```yaml
custom_rules:
  registration: form_validation.rules.custom.RegistrationRule

forms:
  registration:
    rules:
      password: [required, "min:6", "registration:username"]
```

The loader imports each configured class once (dotted path), and every call
to ``load_form_rules()`` builds fresh instances, passing token parameters to
the constructor (``"registration:username"`` -> ``RegistrationRule("username")``).
Fresh instances keep stateful rule objects from leaking state between
submissions. Names not listed under ``custom_rules`` are left for the rule
registry to resolve.
"""

import importlib
import logging
from typing import Any, Dict, List, Union

from .errors import ConfigurationError
from .rule_parser import parse_token

logger = logging.getLogger(__name__)


class RuleLoader:
    """Resolves custom rule names in form definitions to rule objects."""

    def __init__(self, custom_rules: Dict[str, str]):
        """
        Initialize rule loader.

        Args:
            custom_rules: Mapping of rule name -> dotted path of the rule class
        """
        self.custom_rules = dict(custom_rules)
        self.loaded_classes: Dict[str, type] = {}  # Cache: rule name -> class

    def load_all(self) -> None:
        """Import every configured class up front so bad paths fail at start-up."""
        for name in self.custom_rules:
            self._load_class(name)

    def load_form_rules(self, rules: Dict[str, Union[str, List[str]]]) -> Dict[str, List[Any]]:
        """
        Expand a form's rule declarations into parser-ready rule lists.

        Args:
            rules: Field -> pipe-delimited string or list of rule strings

        Returns:
            Field -> list mixing rule strings and custom rule instances
        """
        expanded = {}
        for field, declaration in rules.items():
            tokens = declaration.split("|") if isinstance(declaration, str) else declaration
            expanded[field] = [self._expand_token(token) for token in tokens if token.strip()]
        return expanded

    def _expand_token(self, token: str) -> Any:
        name, params = parse_token(token)
        if name not in self.custom_rules:
            return token.strip()
        rule_class = self._load_class(name)
        try:
            return rule_class(*params)
        except TypeError as e:
            raise ConfigurationError(
                f"Custom rule {name!r} does not accept parameters {params!r}: {e}"
            ) from e

    def _load_class(self, name: str) -> type:
        if name in self.loaded_classes:
            return self.loaded_classes[name]

        dotted_path = self.custom_rules[name]
        module_name, class_name = dotted_path.rsplit(".", 1)
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ConfigurationError(
                f"Failed to import custom rule {name!r} from {module_name}: {e}"
            ) from e

        rule_class = getattr(module, class_name, None)
        if rule_class is None:
            raise ConfigurationError(
                f"Custom rule class '{class_name}' not found in {module_name}"
            )
        if not isinstance(rule_class, type) or not callable(getattr(rule_class, "validate", None)):
            raise ConfigurationError(
                f"Custom rule {dotted_path} must be a class with a validate(attribute, value, fail) method"
            )

        self.loaded_classes[name] = rule_class
        logger.debug("Custom rule class loaded", extra={"rule_name": name, "rule_class": dotted_path})
        return rule_class
