import logging
from typing import List

from django.db import DatabaseError

from apps.core.exceptions import NotFound, StorageError
from apps.organizations.models import Branch

logger = logging.getLogger(__name__)


class BranchRepository:

    def list_by_org(self, org_id: str) -> List[Branch]:
        try:
            return list(Branch.objects.filter(organization_id=org_id))
        except DatabaseError as e:
            raise StorageError("Failed to load branches") from e

    def resolve_fulfilling_branch(self, org_id: str) -> str:
        """First branch of the organization; not geo- or capacity-aware."""
        branches = self.list_by_org(org_id)
        if not branches:
            logger.warning(f"No branch configured for organization {org_id}")
            raise NotFound(f"No fulfilling branch configured for organization {org_id}.")
        return branches[0].branch_id
