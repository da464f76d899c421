"""Stock-change events via NDJSON upload and the Celery task."""
import json

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from apps.catalog.models import Product
from apps.stocks.tasks import process_stock_event

pytestmark = pytest.mark.django_db

URL = "/api/v1/internal/stock/bulk_update"


def _ndjson(*lines):
    return "\n".join(line if isinstance(line, str) else json.dumps(line) for line in lines).encode()


def test_bulk_upload_applies_every_line():
    content = _ndjson(
        {"product_id": "p1", "new_stock": 4, "product_name": "Aspirin"},
        {"product_id": "p2", "new_stock": 0, "product_name": "Bandage"},
        "",
    )
    upload = SimpleUploadedFile("events.ndjson", content, content_type="application/x-ndjson")

    response = APIClient().post(URL, {"file": upload}, format="multipart", HTTP_X_ORGANIZATION_ID="o1")

    assert response.status_code == 200
    assert response.json()["status"] == "success"
    assert response.json()["total_events_processed"] == 2
    assert Product.objects.get(product_id="p2").current_status == Product.STATUS_OUT_OF_STOCK


def test_bulk_upload_reports_bad_lines():
    content = _ndjson(
        {"organization_id": "o1", "product_id": "p1", "new_stock": 4},
        "{not json",
        {"organization_id": "o1", "new_stock": 4},
        {"organization_id": "o1", "product_id": "p2", "new_stock": "many"},
    )
    upload = SimpleUploadedFile("events.ndjson", content)

    response = APIClient().post(URL, {"file": upload}, format="multipart")

    body = response.json()
    assert body["status"] == "partial_success"
    assert [conflict["line"] for conflict in body["conflicts"]] == [2, 3, 4]
    assert [item["product_id"] for item in body["applied"]] == ["p1"]


def test_bulk_upload_requires_ndjson_file():
    upload = SimpleUploadedFile("events.csv", b"product_id,new_stock")

    response = APIClient().post(URL, {"file": upload}, format="multipart")

    assert response.status_code == 400


def test_process_stock_event_task():
    event = {"organization_id": "o1", "product_id": "p1", "new_stock": 3, "product_name": "Aspirin", "mrp": "9.99"}

    result = process_stock_event.delay(event).get()
    process_stock_event.delay(event).get()

    assert result == {"product_id": "p1", "stock_level": 3, "current_status": "In Stock"}
    assert Product.objects.filter(product_id="p1").count() == 1
    assert Product.objects.get(product_id="p1").is_visible is False
