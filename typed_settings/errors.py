from __future__ import annotations


class SettingsError(Exception):
    """Base class for all typed-settings errors."""


class UnsupportedTypeError(SettingsError, TypeError):
    def __init__(self, type_name: str):
        super().__init__(f"Value of type {type_name} is not supported.")
        self.type_name = type_name


class SettingsValueError(SettingsError, ValueError):
    """
    A value could not be encoded for, or decoded from, the backend.

    Raised for corrupted decimal strings, native values whose type does not
    match the requested kind, and integers outside their kind's range.
    """
