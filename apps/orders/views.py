import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from apps.catalog.views import organization_from_header
from apps.orders.checkout import CheckoutPipeline, CheckoutRequest
from apps.orders.details import OrderDetailsService

logger = logging.getLogger(__name__)


class CheckoutInitiateAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["storefront"],
        summary="Initiate checkout: create the inventory sale and a pending order",
        parameters=[OpenApiParameter("org_id", OpenApiTypes.STR, OpenApiParameter.PATH, required=True)],
        request=OpenApiTypes.OBJECT,
        responses={
            201: OpenApiResponse(OpenApiTypes.OBJECT, description="Pending order"),
            409: OpenApiResponse(OpenApiTypes.OBJECT, description="Rejected by inventory"),
            503: OpenApiResponse(OpenApiTypes.OBJECT, description="Inventory unavailable"),
        },
    )
    def post(self, request, org_id: str):
        checkout_request = CheckoutRequest.from_dict(request.data)
        order = CheckoutPipeline().create_pending_order(org_id, checkout_request)
        return Response(order.as_dict(), status=status.HTTP_201_CREATED)


class PaymentOrderAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["storefront"],
        summary="Create a payment order for a pending order",
        parameters=[OpenApiParameter("org_id", OpenApiTypes.STR, OpenApiParameter.PATH, required=True)],
        request=OpenApiTypes.OBJECT,
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def post(self, request, org_id: str):
        payment_order = CheckoutPipeline().create_payment_order(org_id, request.data)
        response = Response(payment_order, status=status.HTTP_200_OK)
        response["Cache-Control"] = "no-store"
        return response


class OrderDetailsAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["internal"],
        summary="Order details with package estimate for shipping",
        parameters=[
            OpenApiParameter("X-Organization-Id", OpenApiTypes.STR, OpenApiParameter.HEADER, required=True),
            OpenApiParameter("order_id", OpenApiTypes.STR, OpenApiParameter.PATH, required=True),
        ],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), 404: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def get(self, request, order_id: str):
        org_id = organization_from_header(request)
        details = OrderDetailsService().get_order_details(org_id, order_id)
        return Response(details, status=status.HTTP_200_OK)
