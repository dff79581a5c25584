"""Translate domain errors into REST responses."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "invalid": status.HTTP_400_BAD_REQUEST,
    "conflict": status.HTTP_409_CONFLICT,
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
}


def domain_exception_handler(exc, context):  # type: ignore
    """DRF ``EXCEPTION_HANDLER`` that understands ``DomainError``."""

    if isinstance(exc, DomainError):
        http_status = STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
        view = context.get("view")
        logger.info(
            f"Domain error {exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
        )
        return Response({"code": exc.code, "detail": exc.message}, status=http_status)
    return exception_handler(exc, context)
