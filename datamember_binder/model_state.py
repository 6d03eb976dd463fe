from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class ValidationState(Enum):
    UNVALIDATED = "unvalidated"
    VALID = "valid"
    INVALID = "invalid"
    SKIPPED = "skipped"


@dataclass
class ModelStateEntry:
    attempted_value: str | None = None
    errors: list[str] = field(default_factory=list)
    state: ValidationState = ValidationState.UNVALIDATED


def _is_under(key: str, prefix: str) -> bool:
    if not prefix:
        return True
    if not key.startswith(prefix):
        return False
    return len(key) == len(prefix) or key[len(prefix)] in ".["


class ModelState:
    """
    Errors and attempted values collected while binding one request,
    keyed by composite field path ("address.street", "items[0].name").
    """

    def __init__(self):
        self._entries: dict[str, ModelStateEntry] = {}

    def _entry(self, key: str) -> ModelStateEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = ModelStateEntry()
        return entry

    def add_error(self, key: str, message: str) -> None:
        entry = self._entry(key)
        entry.errors.append(message)
        entry.state = ValidationState.INVALID

    def try_add_error(self, key: str, message: str) -> bool:
        """Add the error only when neither the key nor anything below it is invalid yet."""
        if self.field_state(key) is ValidationState.INVALID:
            return False
        self.add_error(key, message)
        return True

    def set_attempted_value(self, key: str, raw_value: str | None) -> None:
        self._entry(key).attempted_value = raw_value

    def mark_valid(self, key: str) -> None:
        entry = self._entry(key)
        if entry.state is not ValidationState.INVALID:
            entry.state = ValidationState.VALID

    def mark_skipped(self, key: str) -> None:
        entry = self._entry(key)
        if entry.state is ValidationState.UNVALIDATED:
            entry.state = ValidationState.SKIPPED

    def field_state(self, key: str) -> ValidationState:
        states = set()
        for name, entry in self._entries.items():
            if not _is_under(name, key):
                continue
            if entry.state is ValidationState.INVALID:
                return ValidationState.INVALID
            states.add(entry.state)
        if not states or ValidationState.UNVALIDATED in states:
            return ValidationState.UNVALIDATED
        if states == {ValidationState.SKIPPED}:
            return ValidationState.SKIPPED
        return ValidationState.VALID

    def is_valid_field(self, key: str) -> bool:
        return self.field_state(key) is not ValidationState.INVALID

    @property
    def is_valid(self) -> bool:
        return self.error_count == 0

    @property
    def error_count(self) -> int:
        return sum(len(entry.errors) for entry in self._entries.values())

    def errors(self) -> dict[str, list[str]]:
        return {key: list(entry.errors) for key, entry in self._entries.items() if entry.errors}

    def merge(self, other: "ModelState") -> None:
        for key, entry in other._entries.items():
            mine = self._entry(key)
            if entry.attempted_value is not None:
                mine.attempted_value = entry.attempted_value
            for message in entry.errors:
                # repeated values bind under one key; only the first error per path is kept
                self.try_add_error(key, message)
            if mine.state is not ValidationState.INVALID and entry.state is not ValidationState.UNVALIDATED:
                mine.state = entry.state

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> ModelStateEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ModelState({self.errors()!r})"
