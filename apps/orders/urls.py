from django.urls import path
from .views import CheckoutInitiateAPIView, PaymentOrderAPIView, OrderDetailsAPIView


urlpatterns = [
    path("public/storefront/<str:org_id>/checkout/initiate", CheckoutInitiateAPIView.as_view(), name="checkout_initiate"),
    path("public/storefront/<str:org_id>/payments/create-order", PaymentOrderAPIView.as_view(), name="payment_order"),
    path("internal/orders/<str:order_id>/details", OrderDetailsAPIView.as_view(), name="order_details"),
]
