"""
Error taxonomy shared by the service layer and the HTTP API.

Validation errors are raised before anything is written; authorization errors
are logged for diagnostics; nothing here is retried automatically.
"""

import logging

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ValidationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'
    default_code = 'invalid'


class SelfDealingError(ValidationFailed):
    default_detail = "You can't contact yourself!"
    default_code = 'self_dealing'


class InvalidPriceError(ValidationFailed):
    default_detail = 'Please enter a valid price'
    default_code = 'invalid_price'


class NotParticipantError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied'
    default_code = 'not_participant'


class PaymentFailedError(APIException):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = 'Failed to place order. Please try again.'
    default_code = 'payment_failed'


class NegotiationAlreadyResolved(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Negotiation has already been resolved'
    default_code = 'already_resolved'


def _error_message(detail):
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _error_message(detail['detail'])
        return {key: _error_message(value) for key, value in detail.items()}
    if isinstance(detail, list):
        if len(detail) == 1:
            return _error_message(detail[0])
        return [_error_message(item) for item in detail]
    return str(detail)


def api_exception_handler(exc, context):
    """Render API errors as ``{"error": ...}`` and log the ones worth diagnosing."""
    if isinstance(exc, ObjectDoesNotExist):
        exc = NotFound(f"{exc.__class__.__qualname__.split('.')[0]} not found")

    response = exception_handler(exc, context)
    view = context.get('view')
    view_name = view.__class__.__name__ if view is not None else 'unknown'

    if response is None:
        logger.error("Unhandled error in %s", view_name, exc_info=exc)
        return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if response.status_code == status.HTTP_403_FORBIDDEN:
        logger.warning("Authorization rejected in %s: %s", view_name, exc)

    response.data = {'error': _error_message(response.data)}
    return response
