"""
HTTP entry points — thin translation to MovementEngine calls.

The tenant comes from the request attribute set by the auth layer
(NOWSTOCK['TENANT_REQUEST_ATTRIBUTE']). The actor is the logged user.
"""

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.response import Response

from nowstock.conf import nowstock_settings
from nowstock.exceptions import MovementError, StorageFault
from nowstock.services.engine import MovementEngine

from .serializers import (
    ManualMovementSerializer,
    MovementHistorySerializer,
    ScanSerializer,
    StockLevelSerializer,
)

logger = logging.getLogger('nowstock')

ERROR_STATUS = {
    MovementError.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    MovementError.UNREGISTERED_TAG: status.HTTP_404_NOT_FOUND,
    MovementError.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
}


def request_tenant(request):
    return getattr(request, nowstock_settings.TENANT_REQUEST_ATTRIBUTE, None)


class HasTenant(BasePermission):
    message = "Empresa não identificada para este usuário."

    def has_permission(self, request, view):
        return request_tenant(request) is not None


def _optional_int(params, name):
    value = params.get(name)
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MovementError('INVALID_FILTER', f"Filtro '{name}' inválido.", **{name: value})


class EngineMixin:
    permission_classes = [IsAuthenticated, HasTenant]

    def get_engine(self):
        return MovementEngine()

    @staticmethod
    def outcome_response(outcome):
        if outcome.ok:
            return Response(outcome.as_dict(), status=status.HTTP_201_CREATED)
        return Response(outcome.as_dict(), status=ERROR_STATUS[outcome.error])

    @staticmethod
    def storage_fault_response(exc):
        headers = {"Retry-After": "1"} if exc.retryable else None
        return Response(
            {"error": exc.code, "message": exc.message, "retryable": exc.retryable},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
            headers=headers,
        )


class MovementViewSet(EngineMixin, viewsets.ViewSet):
    """Movement history, manual movements and scan simulation."""

    def list(self, request):
        params = request.query_params
        try:
            qs = self.get_engine().history(
                request_tenant(request),
                kind=params.get("kind") or None,
                product_id=_optional_int(params, "product_id"),
                actor_id=_optional_int(params, "actor_id"),
            )
        except MovementError as e:
            return Response(e.as_dict(), status=status.HTTP_400_BAD_REQUEST)
        return Response(MovementHistorySerializer(qs, many=True).data)

    def create(self, request):
        serializer = ManualMovementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            outcome = self.get_engine().record_manual(
                request_tenant(request),
                request.user.pk,
                data["kind"],
                data["quantity"],
                unit=data.get("unit"),
                justification=data.get("justification"),
                rfid_tag=data.get("rfid_tag"),
                product_id=data.get("product_id"),
                direction=data.get("direction"),
            )
        except StorageFault as e:
            return self.storage_fault_response(e)
        return self.outcome_response(outcome)

    @action(detail=False, methods=["post"])
    def scan(self, request):
        serializer = ScanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            outcome = self.get_engine().record_scan(
                request_tenant(request),
                serializer.validated_data["rfid_tag"],
                request.user.pk,
            )
        except StorageFault as e:
            return self.storage_fault_response(e)
        return self.outcome_response(outcome)


class StockLevelViewSet(EngineMixin, viewsets.ViewSet):
    """Current stock listing."""

    def list(self, request):
        levels = self.get_engine().levels(request_tenant(request))
        return Response(StockLevelSerializer(levels, many=True).data)

    def retrieve(self, request, pk=None):
        engine = self.get_engine()
        tenant_id = request_tenant(request)
        try:
            product_id = int(pk)
        except (TypeError, ValueError):
            product_id = None
        product = engine.resolver.get(tenant_id, product_id) if product_id else None
        if product is None:
            return Response(
                MovementError('PRODUCT_NOT_FOUND', product_id=pk).as_dict(),
                status=status.HTTP_404_NOT_FOUND,
            )
        quantity = engine.current(tenant_id, product_id)
        return Response({
            "product_id": product_id,
            "name": product.name,
            "quantity": quantity,
            "minimum_quantity": product.minimum_quantity,
            "below_minimum": quantity <= product.minimum_quantity,
        })
