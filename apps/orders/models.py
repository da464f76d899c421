from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Order(models.Model):
    """
    Storefront order created at checkout. Line items are the ones returned by
    the inventory sale, never the client's cart.
    """
    STATUS_PENDING_PAYMENT = 'PENDING_PAYMENT'
    ORDER_STATUS_CHOICES = [
        (STATUS_PENDING_PAYMENT, 'Pending payment'),
        ('PAID', 'Paid'),
        ('CANCELLED', 'Cancelled'),
    ]

    order_id = models.CharField(primary_key=True, max_length=100, editable=False)
    organization_id = models.CharField(max_length=100)
    branch_id = models.CharField(max_length=100, null=True, blank=True, help_text="Fulfilling branch")
    customer_id = models.CharField(max_length=100, null=True, blank=True)
    customer_info = models.JSONField(default=dict, blank=True, help_text="{name, email, phone}")
    shipping_address = models.JSONField(default=dict, blank=True)
    items = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder,
                             help_text="Sale items returned by inventory")
    grand_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    sale_id = models.CharField(max_length=100, null=True, blank=True, help_text="Inventory sale reference")
    status = models.CharField(max_length=50, choices=ORDER_STATUS_CHOICES, default=STATUS_PENDING_PAYMENT)
    payment_id = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'storefront_orders'
        indexes = [
            models.Index(fields=['organization_id', 'created_at'], name='orders_org_created_idx'),
        ]

    def __str__(self):
        return f"Order {self.order_id} ({self.status})"

    def as_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "organization_id": self.organization_id,
            "branch_id": self.branch_id,
            "customer_id": self.customer_id,
            "customer_info": dict(self.customer_info or {}),
            "shipping_address": dict(self.shipping_address or {}),
            "items": list(self.items or []),
            "grand_total": str(self.grand_total),
            "sale_id": self.sale_id,
            "status": self.status,
            "payment_id": self.payment_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
