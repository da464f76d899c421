from typing import List, Dict, Any
import json
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.parsers import MultiPartParser, FormParser
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from apps.core.exceptions import StorefrontError, InvalidInput
from apps.catalog.payloads import StockChangeEvent
from apps.catalog.reconciliation import CatalogReconciler

logger = logging.getLogger(__name__)


class StockUpdateAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["stocks"],
        summary="Apply one inventory stock-change event",
        request=OpenApiTypes.OBJECT,
        responses={
            200: OpenApiResponse(OpenApiTypes.OBJECT, description="Updated storefront product"),
        },
    )
    def post(self, request):
        if not isinstance(request.data, dict):
            raise InvalidInput("request body must be an object")
        event = StockChangeEvent.from_dict(request.data)
        product = CatalogReconciler().apply_stock_event(event)
        return Response(product.as_dict(), status=status.HTTP_200_OK)


class BulkStockUpdateAPIView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        tags=["stocks"],
        summary="Bulk stock update from file upload (NDJSON)",
        parameters=[
            OpenApiParameter("X-Organization-Id", OpenApiTypes.STR, OpenApiParameter.HEADER,
                             description="Used for lines without organization_id"),
        ],
        request={
            "multipart/form-data": {
                "type": "object",
                "properties": {
                    "file": {
                        "type": "string",
                        "format": "binary",
                        "description": "NDJSON file with stock-change events"
                    }
                }
            }
        },
        responses={
            200: OpenApiResponse(OpenApiTypes.OBJECT, description="Success or partial_success"),
            400: OpenApiResponse(OpenApiTypes.OBJECT, description="Bad request"),
        },
    )
    def post(self, request):
        """
        Process NDJSON file upload with stock-change events.
        Each line is applied on its own; failures are reported per line.
        """
        if 'file' not in request.FILES:
            return Response({"error": "file required"}, status=status.HTTP_400_BAD_REQUEST)

        uploaded_file = request.FILES['file']
        if not uploaded_file.name.endswith('.ndjson'):
            return Response({"error": "file must be .ndjson"}, status=status.HTTP_400_BAD_REQUEST)

        default_org = request.headers.get("X-Organization-Id")
        conflicts: List[Dict[str, Any]] = []
        applied: List[Dict[str, Any]] = []
        reconciler = CatalogReconciler()

        for line_num, line in enumerate(uploaded_file, 1):
            try:
                line = line.decode('utf-8').strip()
            except UnicodeDecodeError:
                conflicts.append({"line": line_num, "reason": "line is not valid UTF-8"})
                continue
            if not line:
                continue

            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON on line {line_num}: {e}")
                conflicts.append({"line": line_num, "reason": "invalid JSON"})
                continue
            if not isinstance(data, dict):
                conflicts.append({"line": line_num, "reason": "event must be an object"})
                continue

            try:
                event = StockChangeEvent.from_dict(data, org_id=data.get("organization_id") or default_org)
                product = reconciler.apply_stock_event(event)
            except StorefrontError as e:
                logger.error(f"Failed to apply stock event on line {line_num}: {e.message}")
                conflicts.append({"line": line_num, "product_id": data.get("product_id"), "reason": e.message})
                continue

            applied.append({
                "product_id": product.product_id,
                "stock_level": product.stock_level,
                "current_status": product.current_status,
            })

        if not applied and not conflicts:
            return Response({"error": "no events found"}, status=status.HTTP_400_BAD_REQUEST)

        if conflicts:
            return Response({
                "status": "partial_success",
                "conflicts": conflicts,
                "applied": applied,
                "total_events_processed": len(applied)
            }, status=status.HTTP_200_OK)

        return Response({
            "status": "success",
            "applied": applied,
            "total_events_processed": len(applied)
        }, status=status.HTTP_200_OK)
