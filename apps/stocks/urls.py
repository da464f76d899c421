from django.urls import path
from apps.stocks.views import StockUpdateAPIView, BulkStockUpdateAPIView

urlpatterns = [
    path('internal/stock/events', StockUpdateAPIView.as_view(), name='stock_event'),
    path('internal/stock/bulk_update', BulkStockUpdateAPIView.as_view(), name='stock_bulk_update'),
]
