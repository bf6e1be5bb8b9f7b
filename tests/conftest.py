import pytest

from form_validation.messages import set_locale, set_translator
from form_validation.rule_registry import reset_registry


@pytest.fixture(autouse=True)
def reset_process_state():
    """Start every test with a fresh registry, translator and locale."""
    reset_registry()
    set_translator(None)
    set_locale(None)
    yield
    reset_registry()
    set_translator(None)
    set_locale(None)
