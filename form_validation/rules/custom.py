"""Application rule objects shipped with the library and used by the bundled forms."""

from typing import Any

from .base import DataAwareRule, ValidationRule, ValidatorAwareRule


class Uppercase(ValidationRule):
    """Value must be written entirely in upper case."""

    def validate(self, attribute: str, value: Any, fail) -> None:
        text = str(value)
        if text.upper() != text:
            fail("The :attribute must be UPPERCASE")


class RegistrationRule(ValidationRule, DataAwareRule, ValidatorAwareRule):
    """
    Password rule for sign-up forms: the password must not repeat the
    username, and must not repeat its own field name either.
    """

    def __init__(self, username_field: str = "username"):
        self.username_field = username_field
        self._data = {}
        self._validator = None

    def set_data(self, data) -> None:
        self._data = data

    def set_validator(self, validator) -> None:
        self._validator = validator

    def validate(self, attribute: str, value: Any, fail) -> None:
        username = self._data.get(self.username_field)
        if username is not None and value == username:
            other = self._validator.display_name(self.username_field) if self._validator else self.username_field
            fail(f":attribute must be different from {other}")
        if isinstance(value, str) and value.lower() == attribute.lower():
            fail(":attribute must not be the word :attribute")
