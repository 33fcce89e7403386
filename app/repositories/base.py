"""
CRM storage port.

Abstract interface the rule services depend on. Implementations:
SqlAlchemyCrmStore (production) and the in-memory store used by the tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple


class _Unset:
    """Marker for an update field that was not provided."""

    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET: Any = _Unset()


class _PartialUpdate:
    """Base for explicit optional-field update objects."""

    def changes(self) -> Dict[str, Any]:
        """Fields that were provided, in declaration order."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass
class ClientUpdate(_PartialUpdate):
    """Partial update of a client. None clears a field; UNSET leaves it alone."""

    first_name: Optional[str] = UNSET
    last_name: Optional[str] = UNSET
    email: Optional[str] = UNSET
    phone: Optional[str] = UNSET
    notes: Optional[str] = UNSET
    birthday: Optional[date] = UNSET
    last_visit_at: Optional[datetime] = UNSET


@dataclass
class TagUpdate(_PartialUpdate):
    """Partial update of a tag."""

    name: Optional[str] = UNSET
    color: Optional[str] = UNSET
    auto_apply: Optional[bool] = UNSET
    auto_apply_rule: Optional[str] = UNSET


class CrmStore(ABC):
    """
    Row-level access to clients, tags, tag assignments, sales and tenants.

    Every client/tag query is tenant-scoped. Writes are not committed by the
    store; the caller owns the unit of work.
    """

    # --- Clients ---

    @abstractmethod
    def get_client(self, tenant_id: int, client_id: int):
        """Client of the tenant, or None."""

    @abstractmethod
    def update_client(self, client_id: int, update: ClientUpdate) -> None:
        """Apply one mutation per provided field."""

    @abstractmethod
    def list_clients_with_birthday(self, tenant_id: int) -> List[Any]:
        """Clients whose birthday is set."""

    @abstractmethod
    def list_lapsed_clients(self, tenant_id: int, visited_before: datetime, limit: int) -> List[Any]:
        """Clients whose last visit is older than visited_before, oldest first."""

    @abstractmethod
    def list_recent_clients(self, tenant_id: int, created_since: datetime, limit: int) -> List[Any]:
        """Clients created at or after created_since, newest first."""

    # --- Sales ---

    @abstractmethod
    def count_completed_sales(self, client_id: int) -> int:
        """Number of completed sales of a client."""

    # --- Tags ---

    @abstractmethod
    def list_tags(self, tenant_id: int) -> List[Tuple[Any, int]]:
        """All tags of the tenant ordered by name, each with its usage count."""

    @abstractmethod
    def list_auto_apply_tags(self, tenant_id: int) -> List[Any]:
        """Tags of the tenant flagged auto_apply."""

    @abstractmethod
    def get_tag(self, tenant_id: int, tag_id: int):
        """Tag of the tenant, or None."""

    @abstractmethod
    def find_tag_by_name(self, tenant_id: int, name: str):
        """Tag with exactly this name (case-sensitive), or None."""

    @abstractmethod
    def insert_tag_if_absent(self, tenant_id: int, name: str, color: str,
                             auto_apply: bool = False,
                             auto_apply_rule: Optional[str] = None) -> Tuple[Any, bool]:
        """
        Create a tag unless one with the same name exists.

        Returns (tag, created). A concurrent insert of the same name is
        reported as (existing_tag, False).
        """

    @abstractmethod
    def update_tag(self, tag_id: int, update: TagUpdate) -> None:
        """Apply one mutation per provided field."""

    @abstractmethod
    def delete_tag(self, tag_id: int) -> None:
        """Delete a tag and its assignments."""

    # --- Tag assignments ---

    @abstractmethod
    def list_client_assignments(self, client_id: int) -> List[Any]:
        """Assignments of a client with their tags, oldest first."""

    @abstractmethod
    def assign_tag_if_absent(self, client_id: int, tag_id: int) -> bool:
        """Insert the (client, tag) pair; False if it was already present."""

    @abstractmethod
    def remove_tag_assignment(self, client_id: int, tag_id: int) -> bool:
        """Delete the (client, tag) pair; False if there was none."""

    @abstractmethod
    def count_tag_assignments(self, tag_id: int) -> int:
        """Number of clients carrying the tag."""

    @abstractmethod
    def move_tag_assignments(self, from_tag_id: int, to_tag_id: int) -> int:
        """Re-point assignments of one tag to another; returns rows moved."""

    # --- Tenants ---

    @abstractmethod
    def list_tenants(self) -> List[Any]:
        """Every tenant on the platform (service-level access)."""
