from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Product(models.Model):
    """
    Storefront presentation record of an inventory product.
    Stock and price are cached from inventory events; descriptions, images,
    tags and visibility are owned here. Keyed by (organization_id, product_id).
    """
    STATUS_IN_STOCK = 'In Stock'
    STATUS_OUT_OF_STOCK = 'Out of Stock'
    STATUS_CHOICES = [
        (STATUS_IN_STOCK, 'In Stock'),
        (STATUS_OUT_OF_STOCK, 'Out of Stock'),
    ]

    organization_id = models.CharField(max_length=100, help_text="Owning organization (tenant)")
    product_id = models.CharField(max_length=100, help_text="Inventory product identifier")

    # Cached from inventory
    product_name = models.TextField(blank=True, default='', help_text="Product name")
    mrp = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Maximum retail price"
    )
    category_name = models.TextField(null=True, blank=True, help_text="Inventory category name")
    tax_profile_id = models.CharField(max_length=100, null=True, blank=True)
    gst_type = models.CharField(max_length=50, null=True, blank=True)

    # Presentation
    category_id = models.CharField(max_length=100, null=True, blank=True, help_text="Storefront category")
    rich_description = models.TextField(null=True, blank=True)
    highlights = models.TextField(null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)
    slug = models.CharField(max_length=255, null=True, blank=True)
    is_visible = models.BooleanField(default=False, help_text="Shown on the public storefront")
    images = models.JSONField(default=list, blank=True, help_text="Image assets sorted by display_order")

    # Stock cache
    stock_level = models.IntegerField(default=0, help_text="Last stock count received from inventory")
    current_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_OUT_OF_STOCK)

    # Shipping profile
    dimensions = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder,
                                  help_text="{length, width, height} in cm")
    weight = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder,
                              help_text="{value} in kg")

    created_at = models.DateTimeField(auto_now_add=True, help_text="First write timestamp")

    class Meta:
        db_table = 'storefront_products'
        verbose_name = 'Storefront Product'
        verbose_name_plural = 'Storefront Products'
        indexes = [
            models.Index(fields=['organization_id', 'is_visible', 'product_id'], name='products_org_visible_idx'),
            models.Index(fields=['organization_id', 'category_id'], name='products_org_category_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['organization_id', 'product_id'],
                name='unique_org_product'
            ),
        ]

    def __str__(self):
        return f"{self.product_name} ({self.product_id})"

    def as_dict(self) -> dict:
        return {
            "organization_id": self.organization_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "mrp": str(self.mrp) if self.mrp is not None else None,
            "category_name": self.category_name,
            "category_id": self.category_id,
            "tax_profile_id": self.tax_profile_id,
            "gst_type": self.gst_type,
            "rich_description": self.rich_description,
            "highlights": self.highlights,
            "tags": list(self.tags or []),
            "slug": self.slug,
            "is_visible": self.is_visible,
            "images": list(self.images or []),
            "stock_level": self.stock_level,
            "current_status": self.current_status,
            "dimensions": self.dimensions,
            "weight": self.weight,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Category(models.Model):
    """
    Storefront navigation category. parent_category_id is a plain reference;
    the tree is not validated for cycles.
    """
    category_id = models.CharField(primary_key=True, max_length=100, editable=False)
    organization_id = models.CharField(max_length=100)
    name = models.TextField(help_text="Category name")
    slug = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    image_url = models.TextField(null=True, blank=True)
    parent_category_id = models.CharField(max_length=100, null=True, blank=True)

    class Meta:
        db_table = 'storefront_categories'
        verbose_name = 'Storefront Category'
        verbose_name_plural = 'Storefront Categories'
        indexes = [
            models.Index(fields=['organization_id', 'name'], name='categories_org_name_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.category_id})"

    def as_dict(self) -> dict:
        return {
            "category_id": self.category_id,
            "organization_id": self.organization_id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "image_url": self.image_url,
            "parent_category_id": self.parent_category_id,
        }
