from __future__ import annotations


class MusicSearchError(Exception):
    """Base error. ``message`` is safe to show to an end user."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigError(MusicSearchError):
    default_message = "Service is not configured."


class AuthError(MusicSearchError):
    pass


class ValidationError(AuthError):
    default_message = "Invalid email or password."


class DuplicateUser(AuthError):
    default_message = "User already exists."


class InvalidCredentials(AuthError):
    default_message = "Invalid email or password."


class CatalogError(MusicSearchError):
    pass


class TokenFetchError(CatalogError):
    default_message = "We couldn’t retrieve the token. Please try again."


class SearchFetchError(CatalogError):
    default_message = "We couldn’t retrieve the music data. Please try again."

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
