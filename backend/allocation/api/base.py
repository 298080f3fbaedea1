"""
Shared view plumbing: service failures become JSON error responses.

    ValidationError        → 400
    BusinessRuleViolation  → 409
    NotFoundError          → 404
    ConcurrencyConflict    → 409
"""
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from allocation.exceptions import (
    AllocationError, BusinessRuleViolation, ConcurrencyConflict, NotFoundError, ValidationError,
)
from allocation.services.eligibility import EligibilityMatcher

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    BusinessRuleViolation: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConcurrencyConflict: status.HTTP_409_CONFLICT,
}


def error_response(exc: AllocationError) -> Response:
    code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return Response({"detail": exc.message, "error": exc.kind}, status=code)


def get_or_404(model, pk, label=None):
    try:
        return model.objects.get(pk=pk)
    except model.DoesNotExist:
        raise NotFoundError(f"{label or model.__name__} not found", id=str(pk))


class AllocationAPIView(APIView):
    """APIView that renders allocation-core failures instead of raising them."""

    def handle_exception(self, exc):
        if isinstance(exc, AllocationError):
            logger.info("%s %s → %s: %s", self.request.method, self.request.path, exc.kind, exc.message)
            return error_response(exc)
        return super().handle_exception(exc)

    def matcher(self) -> EligibilityMatcher:
        months = self.request.query_params.get("restriction_months")
        if months is None:
            return EligibilityMatcher()
        try:
            return EligibilityMatcher(int(months))
        except ValueError:
            raise ValidationError("restriction_months must be an integer", restriction_months=months)
