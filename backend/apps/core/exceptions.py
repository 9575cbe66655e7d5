from __future__ import annotations

import logging
from contextlib import contextmanager

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "not found"
    default_code = "not_found"


class ValidationFailure(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "invalid input"
    default_code = "validation_failure"


class Unauthorized(APIException):
    """Raised for any credential mismatch. The detail never says which part was wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "invalid credentials"
    default_code = "unauthorized"


class Forbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "not allowed"
    default_code = "forbidden"


class InvalidTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "milestone is not in a state that allows this action"
    default_code = "invalid_transition"


class PersistenceFailure(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Could not save your changes. Please try again."
    default_code = "persistence_failure"


@contextmanager
def persistence_guard(operation: str):
    """
    Convert database errors raised inside the block into PersistenceFailure.
    The underlying error is logged with its traceback and chained as __cause__.
    """
    try:
        yield
    except DatabaseError as exc:
        logger.exception("store operation failed: %s", operation)
        raise PersistenceFailure() from exc


def exception_handler(exc, context):
    if isinstance(exc, PersistenceFailure):
        view = context.get("view")
        logger.error(
            "persistence failure surfaced by %s: %r",
            view.__class__.__name__ if view else "unknown view",
            exc.__cause__,
        )
    return drf_exception_handler(exc, context)
