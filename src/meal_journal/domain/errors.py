"""Errors surfaced to API callers with a stable code."""


class MealJournalError(Exception):
    """Base error carrying a machine-readable code and HTTP status."""

    code = "server_error"
    status_code = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class EmptyMealTextError(MealJournalError):
    """Raised when a meal description is empty."""

    code = "text_required"
    status_code = 400


class NoFoodsIdentifiedError(MealJournalError):
    """Raised when no foods could be extracted from a description."""

    code = "no_foods_identified"
    status_code = 400


class InvalidDateError(MealJournalError):
    code = "invalid_date"
    status_code = 400


class MissingRangeStartError(MealJournalError):
    code = "start_required"
    status_code = 400


class InvalidRequestError(MealJournalError):
    code = "invalid_request"
    status_code = 400


class MealNotFoundError(MealJournalError):
    code = "meal_not_found"
    status_code = 404


class MealItemNotFoundError(MealJournalError):
    code = "item_not_found"
    status_code = 404


class UnauthorizedError(MealJournalError):
    """Raised when a request carries no bearer token."""

    code = "unauthorized"
    status_code = 401


class InvalidTokenError(MealJournalError):
    """Raised when a bearer token does not identify a user."""

    code = "invalid_token"
    status_code = 401


class ProfileNotFoundError(MealJournalError):
    code = "not_found"
    status_code = 404
