import uuid
from django.db import models


class Branch(models.Model):
    """
    Fulfilment location of an organization.
    Checkout and stock lookups source inventory from one branch of the org.
    """
    branch_id = models.CharField(primary_key=True, max_length=100, default=uuid.uuid4, editable=False)
    organization_id = models.CharField(max_length=100, help_text="Owning organization (tenant)")
    name = models.CharField(max_length=255, help_text="Branch name")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Branch creation timestamp")

    class Meta:
        db_table = 'branches'
        verbose_name = 'Branch'
        verbose_name_plural = 'Branches'
        indexes = [
            models.Index(fields=['organization_id'], name='branches_org_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.branch_id})"
