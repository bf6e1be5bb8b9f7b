"""Ordered, multi-valued container of per-field validation messages."""

import json
from typing import Dict, Iterator, List, Mapping, Optional, Union


class MessageBag:
    """
    Maps field names to the ordered list of messages recorded for them.

    Field order is first-insertion order; message order within a field is
    the order in which messages were added.
    """

    def __init__(self, messages: Optional[Mapping[str, List[str]]] = None):
        self._messages: Dict[str, List[str]] = {}
        if messages:
            self.merge(messages)

    def add(self, field: str, message: str) -> "MessageBag":
        """Append a message for a field."""
        self._messages.setdefault(field, []).append(message)
        return self

    def merge(self, other: Union["MessageBag", Mapping[str, List[str]]]) -> "MessageBag":
        """Append every message of another bag (or field -> messages mapping)."""
        source = other.all() if isinstance(other, MessageBag) else other
        for field, messages in source.items():
            if isinstance(messages, str):
                messages = [messages]
            for message in messages:
                self.add(field, message)
        return self

    def has(self, field: str) -> bool:
        return bool(self._messages.get(field))

    def get(self, field: str) -> List[str]:
        return list(self._messages.get(field, []))

    def first(self, field: Optional[str] = None) -> Optional[str]:
        """
        Return the first message for a field, or the first message overall
        when no field is given. Returns None when there is nothing to return.
        """
        if field is not None:
            messages = self._messages.get(field)
            return messages[0] if messages else None
        for messages in self._messages.values():
            if messages:
                return messages[0]
        return None

    def all(self) -> Dict[str, List[str]]:
        """Ordered copy of the field -> messages mapping."""
        return {field: list(messages) for field, messages in self._messages.items()}

    def keys(self) -> List[str]:
        return list(self._messages.keys())

    def count(self) -> int:
        """Total number of messages across all fields."""
        return sum(len(messages) for messages in self._messages.values())

    def is_empty(self) -> bool:
        return self.count() == 0

    def to_structured(self) -> Dict[str, List[str]]:
        """Plain dict of lists, ready for JSON serialization."""
        return self.all()

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_structured(), indent=indent, ensure_ascii=False)

    def __contains__(self, field: object) -> bool:
        return isinstance(field, str) and self.has(field)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return self.count()

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MessageBag):
            return self.all() == other.all()
        if isinstance(other, Mapping):
            return self.all() == {k: list(v) for k, v in other.items()}
        return NotImplemented

    def __repr__(self) -> str:
        return f"MessageBag({self._messages!r})"
