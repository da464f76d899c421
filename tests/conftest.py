"""Shared fixtures: in-memory blob storage, fake remote services, Pillow images."""
import io
from decimal import Decimal

import pytest
from django.core.files.storage import InMemoryStorage
from PIL import Image

from apps.core.exceptions import InventoryConflict
from apps.core.storage import BlobStore
from apps.catalog.images import ImageAssetManager, ImageUpload
from apps.catalog.payloads import StockChangeEvent
from apps.catalog.reconciliation import CatalogReconciler
from apps.catalog.repository import CatalogRepository
from apps.organizations.models import Branch

ORG_ID = "o1"


class FakeInventory:
    """Stands in for InventoryGateway; records calls."""

    def __init__(self, stock=None, sale=None, sale_error=None, detail=None):
        self.stock = stock or {}
        self.sale = sale
        self.sale_error = sale_error
        self.detail = detail or {}
        self.stock_calls = []
        self.sale_requests = []

    def get_stock_batch(self, org_id, branch_id, product_ids):
        self.stock_calls.append((org_id, branch_id, list(product_ids)))
        return {pid: self.stock[pid] for pid in product_ids if pid in self.stock}

    def create_sale(self, sale_request):
        self.sale_requests.append(sale_request)
        if self.sale_error is not None:
            raise self.sale_error
        return self.sale

    def get_public_product_detail(self, org_id, product_id):
        return self.detail


class FakePayment:

    def __init__(self, response=None):
        self.response = response or {"orderId": "pay_123", "status": "created"}
        self.requests = []

    def create_payment_order(self, org_id, order_request):
        self.requests.append((org_id, order_request))
        return self.response


@pytest.fixture
def org_id():
    return ORG_ID


@pytest.fixture
def blob_store():
    return BlobStore(InMemoryStorage())


@pytest.fixture
def repository():
    return CatalogRepository()


@pytest.fixture
def image_manager(repository, blob_store):
    return ImageAssetManager(repository=repository, blob_store=blob_store)


@pytest.fixture
def reconciler(repository, image_manager):
    return CatalogReconciler(repository=repository, image_manager=image_manager)


@pytest.fixture
def branch(db):
    return Branch.objects.create(branch_id="b1", organization_id=ORG_ID, name="Main branch")


@pytest.fixture
def fake_inventory():
    return FakeInventory()


@pytest.fixture
def fake_payment():
    return FakePayment()


@pytest.fixture
def make_image_bytes():
    def _make(size=(64, 48), fmt="PNG", color=(200, 30, 30)):
        buffer = io.BytesIO()
        Image.new("RGB", size, color).save(buffer, format=fmt)
        return buffer.getvalue()
    return _make


@pytest.fixture
def png_upload(make_image_bytes):
    def _upload(client_id=None, filename="photo.png"):
        return ImageUpload(data=make_image_bytes(), content_type="image/png",
                           filename=filename, client_id=client_id)
    return _upload


@pytest.fixture
def make_product(reconciler):
    """Create a product through a stock event, as inventory would."""
    def _make(product_id="p1", stock=10, name="Aspirin", mrp="12.5", org=ORG_ID, visible=None, **extra):
        product = reconciler.apply_stock_event(StockChangeEvent(
            organization_id=org,
            product_id=product_id,
            new_stock=stock,
            product_name=name,
            mrp=Decimal(mrp),
            category=extra.pop("category", None),
        ))
        if visible is not None or extra:
            if visible is not None:
                product.is_visible = visible
            for key, value in extra.items():
                setattr(product, key, value)
            product.save()
        return product
    return _make


@pytest.fixture
def conflict():
    return InventoryConflict('{"error":"Insufficient stock for Aspirin"}')
