"""
Error handling utilities for consistent error message extraction.
"""


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract a message from an unknown error value.

    Falls back to the exception class name when the exception
    carries no message, and to ``"Unknown error"`` for values that
    are not exceptions at all (a rejected promise may carry anything).
    """
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return "Unknown error"
