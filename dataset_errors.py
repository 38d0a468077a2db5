"""Failure kinds raised while ingesting the air-quality dataset."""

from __future__ import annotations

USER_MESSAGE_SUFFIX = "Place the file in Dataset/ to load it."


class DatasetError(ValueError):
    """Base class for terminal ingestion failures."""

    default_message = "Failed to load dataset."

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)


class FetchError(DatasetError):
    default_message = "Dataset not found in the public folder."


class SchemaError(DatasetError):
    default_message = "Required columns (lat, lon, score) not found in dataset."

    def __init__(self, message: str = "", missing_roles: tuple = ()) -> None:
        super().__init__(message)
        self.missing_roles = tuple(missing_roles)


class EmptyDatasetError(DatasetError):
    default_message = "No valid location records found in dataset."


def user_message(exc: BaseException) -> str:
    text = str(exc).strip() if isinstance(exc, DatasetError) else ""
    if not text:
        text = DatasetError.default_message
    return f"{text} {USER_MESSAGE_SUFFIX}"
