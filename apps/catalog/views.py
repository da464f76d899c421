"""
Catalog endpoints.

Admin views manage products, images and categories; public views serve the
storefront; internal views are called by other services (order fulfilment,
search indexing).
"""
import json
import logging
from typing import List

from rest_framework import status
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from apps.core.exceptions import InvalidInput
from apps.catalog.categories import CategoryService
from apps.catalog.images import ImageAssetManager, ImageUpload
from apps.catalog.listing import CatalogListingService
from apps.catalog.payloads import EnrichmentEdits, ImageInstruction, parse_int
from apps.catalog.reconciliation import CatalogReconciler

logger = logging.getLogger(__name__)

ORG_HEADER = OpenApiParameter("X-Organization-Id", OpenApiTypes.STR, OpenApiParameter.HEADER, required=True)
ORG_PATH = OpenApiParameter("org_id", OpenApiTypes.STR, OpenApiParameter.PATH, required=True)
PRODUCT_PATH = OpenApiParameter("product_id", OpenApiTypes.STR, OpenApiParameter.PATH, required=True)


def organization_from_header(request) -> str:
    org_id = request.headers.get("X-Organization-Id")
    if not org_id:
        raise InvalidInput("X-Organization-Id header is required.")
    return org_id


def upload_from_file(uploaded_file) -> ImageUpload:
    """The file name doubles as the client id that pairs a file with its image instruction."""
    return ImageUpload(
        data=uploaded_file.read(),
        content_type=getattr(uploaded_file, "content_type", None),
        filename=uploaded_file.name,
        client_id=uploaded_file.name,
    )


def uploads_from_request(request, field_name: str) -> List[ImageUpload]:
    return [upload_from_file(f) for f in request.FILES.getlist(field_name)]


# --- Admin: products ---

class AdminProductListAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["admin-products"],
        summary="List all storefront products of the organization",
        parameters=[ORG_HEADER],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def get(self, request):
        org_id = organization_from_header(request)
        products = CatalogListingService().list_products(org_id)
        return Response([p.as_dict() for p in products], status=status.HTTP_200_OK)


class AdminProductDetailAPIView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    @extend_schema(
        tags=["admin-products"],
        summary="Full product update (enrichment, shipping profile and image set)",
        parameters=[ORG_HEADER, PRODUCT_PATH],
        request={
            "multipart/form-data": {
                "type": "object",
                "properties": {
                    "request_json": {"type": "string", "description": "JSON product edits"},
                    "image_files": {"type": "array", "items": {"type": "string", "format": "binary"}},
                },
            }
        },
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), 404: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def put(self, request, product_id: str):
        org_id = organization_from_header(request)
        raw = request.data.get("request_json")
        if not raw:
            raise InvalidInput("request_json is required.")
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise InvalidInput("request_json is not valid JSON.") from e

        edits = EnrichmentEdits.from_dict(data)
        files = uploads_from_request(request, "image_files")
        product = CatalogReconciler().update_product(org_id, product_id, edits, files)
        return Response(product.as_dict(), status=status.HTTP_200_OK)

    @extend_schema(
        tags=["admin-products"],
        summary="Delete a storefront product",
        parameters=[ORG_HEADER, PRODUCT_PATH],
        responses={204: None},
    )
    def delete(self, request, product_id: str):
        org_id = organization_from_header(request)
        CatalogReconciler().delete_product(org_id, product_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminProductEnrichAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["admin-products"],
        summary="Enrich presentation fields of a product (sparse patch)",
        parameters=[ORG_HEADER, PRODUCT_PATH],
        request=OpenApiTypes.OBJECT,
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), 404: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def put(self, request, product_id: str):
        org_id = organization_from_header(request)
        edits = EnrichmentEdits.from_dict(request.data)
        product = CatalogReconciler().enrich_product(org_id, product_id, edits)
        return Response(product.as_dict(), status=status.HTTP_200_OK)


class AdminProductImageUploadAPIView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        tags=["admin-images"],
        summary="Upload one image for a product",
        parameters=[ORG_HEADER, PRODUCT_PATH],
        request={
            "multipart/form-data": {
                "type": "object",
                "properties": {
                    "image_file": {"type": "string", "format": "binary"},
                    "alt_text": {"type": "string"},
                    "display_order": {"type": "integer"},
                },
            }
        },
        responses={201: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def post(self, request, product_id: str):
        org_id = organization_from_header(request)
        uploaded_file = request.FILES.get("image_file")
        if uploaded_file is None:
            raise InvalidInput("image_file is required.")

        product = ImageAssetManager().add_image(
            org_id,
            product_id,
            upload_from_file(uploaded_file),
            alt_text=request.data.get("alt_text"),
            display_order=parse_int(request.data.get("display_order"), "display_order", default=0),
        )
        return Response(product.as_dict(), status=status.HTTP_201_CREATED)


class AdminProductImageSetAPIView(APIView):
    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        tags=["admin-images"],
        summary="Replace the image set of a product",
        parameters=[ORG_HEADER, PRODUCT_PATH],
        request={
            "multipart/form-data": {
                "type": "object",
                "properties": {
                    "request_json": {"type": "string", "description": "JSON list of image instructions"},
                    "image_files": {"type": "array", "items": {"type": "string", "format": "binary"}},
                },
            }
        },
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def put(self, request, product_id: str):
        org_id = organization_from_header(request)
        try:
            items = json.loads(request.data.get("request_json") or "[]")
        except (TypeError, ValueError) as e:
            raise InvalidInput("request_json is not valid JSON.") from e
        if not isinstance(items, list):
            raise InvalidInput("request_json must be a list of image instructions.")

        instructions = [ImageInstruction.from_dict(item) for item in items]
        files = uploads_from_request(request, "image_files")
        product = ImageAssetManager().replace_image_set(org_id, product_id, instructions, files)
        return Response(product.as_dict(), status=status.HTTP_200_OK)


class AdminProductImageDeleteAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["admin-images"],
        summary="Delete one image asset and all of its renditions",
        parameters=[
            ORG_HEADER,
            PRODUCT_PATH,
            OpenApiParameter("asset_id", OpenApiTypes.STR, OpenApiParameter.PATH, required=True),
        ],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def delete(self, request, product_id: str, asset_id: str):
        org_id = organization_from_header(request)
        product = ImageAssetManager().delete_image(org_id, product_id, asset_id)
        return Response(product.as_dict(), status=status.HTTP_200_OK)


# --- Admin: categories ---

class AdminCategoryListAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["admin-categories"],
        summary="List categories",
        parameters=[ORG_HEADER],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def get(self, request):
        org_id = organization_from_header(request)
        categories = CategoryService().list_categories(org_id)
        return Response([c.as_dict() for c in categories], status=status.HTTP_200_OK)

    @extend_schema(
        tags=["admin-categories"],
        summary="Create a category",
        parameters=[ORG_HEADER],
        request=OpenApiTypes.OBJECT,
        responses={201: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def post(self, request):
        org_id = organization_from_header(request)
        category = CategoryService().create_category(org_id, request.data)
        return Response(category.as_dict(), status=status.HTTP_201_CREATED)


class AdminCategoryDetailAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["admin-categories"],
        summary="Update a category",
        parameters=[ORG_HEADER, OpenApiParameter("category_id", OpenApiTypes.STR, OpenApiParameter.PATH)],
        request=OpenApiTypes.OBJECT,
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), 404: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def put(self, request, category_id: str):
        org_id = organization_from_header(request)
        category = CategoryService().update_category(org_id, category_id, request.data)
        return Response(category.as_dict(), status=status.HTTP_200_OK)

    @extend_schema(
        tags=["admin-categories"],
        summary="Delete a category",
        parameters=[ORG_HEADER, OpenApiParameter("category_id", OpenApiTypes.STR, OpenApiParameter.PATH)],
        responses={204: None},
    )
    def delete(self, request, category_id: str):
        org_id = organization_from_header(request)
        CategoryService().delete_category(org_id, category_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# --- Public storefront ---

class PublicProductListAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["storefront"],
        summary="List visible products",
        parameters=[ORG_PATH],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def get(self, request, org_id: str):
        products = CatalogListingService().list_visible_products(org_id)
        return Response([p.as_dict() for p in products], status=status.HTTP_200_OK)


class PublicProductPageAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["storefront"],
        summary="Page of visible products with live stock",
        parameters=[
            ORG_PATH,
            OpenApiParameter("category_id", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("page_size", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("cursor", OpenApiTypes.STR, OpenApiParameter.QUERY,
                             description="next_page_token of the previous page"),
        ],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def get(self, request, org_id: str):
        page = CatalogListingService().list_available_products(
            org_id,
            category_id=request.query_params.get("category_id") or None,
            page_size=parse_int(request.query_params.get("page_size"), "page_size"),
            cursor=request.query_params.get("cursor") or None,
        )
        return Response({
            "content": [item.as_dict() for item in page.content],
            "next_page_token": page.next_page_token,
            "has_next": page.has_next,
        }, status=status.HTTP_200_OK)


class PublicProductDetailAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["storefront"],
        summary="Product detail with manufacturer and total stock",
        parameters=[ORG_PATH, PRODUCT_PATH],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), 404: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def get(self, request, org_id: str, product_id: str):
        detail = CatalogListingService().get_public_product_detail(org_id, product_id)
        return Response(detail, status=status.HTTP_200_OK)


class PublicCategoryListAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["storefront"],
        summary="List categories",
        parameters=[ORG_PATH],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def get(self, request, org_id: str):
        categories = CategoryService().list_categories(org_id)
        return Response([c.as_dict() for c in categories], status=status.HTTP_200_OK)


# --- Internal ---

class InternalProductDetailAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["internal"],
        summary="Product by id",
        parameters=[ORG_HEADER, PRODUCT_PATH],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), 404: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def get(self, request, product_id: str):
        org_id = organization_from_header(request)
        product = CatalogListingService().get_product(org_id, product_id)
        return Response(product.as_dict(), status=status.HTTP_200_OK)


class InternalProductBatchAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["internal"],
        summary="Products by ids (unknown ids are skipped)",
        parameters=[ORG_HEADER],
        request={"application/json": {"type": "object", "properties": {
            "product_ids": {"type": "array", "items": {"type": "string"}}}}},
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT)},
    )
    def post(self, request):
        org_id = organization_from_header(request)
        product_ids = request.data.get("product_ids")
        if not isinstance(product_ids, list):
            raise InvalidInput("product_ids must be a list.")
        products = CatalogListingService().products_by_ids(org_id, [str(pid) for pid in product_ids])
        return Response([p.as_dict() for p in products], status=status.HTTP_200_OK)
