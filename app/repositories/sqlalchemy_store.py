"""
SQLAlchemy implementation of the CRM storage port.

Insert-if-absent writes run inside a SAVEPOINT so that a unique-constraint
violation only discards that one insert, not the caller's transaction.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.models import Client, ClientTag, ClientTagAssignment, Sale, SaleStatus, Tenant
from app.repositories.base import CrmStore, ClientUpdate, TagUpdate

logger = logging.getLogger(__name__)


class SqlAlchemyCrmStore(CrmStore):
    """CrmStore over a SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    # --- Clients ---

    def get_client(self, tenant_id, client_id):
        return self.session.query(Client).filter(
            Client.tenant_id == tenant_id,
            Client.id == client_id
        ).first()

    def update_client(self, client_id, update: ClientUpdate):
        client = self.session.get(Client, client_id)
        if client is None:
            return
        for field_name, value in update.changes().items():
            setattr(client, field_name, value)
        self.session.flush()

    def list_clients_with_birthday(self, tenant_id):
        return self.session.query(Client).filter(
            Client.tenant_id == tenant_id,
            Client.birthday.isnot(None)
        ).order_by(Client.id).all()

    def list_lapsed_clients(self, tenant_id, visited_before: datetime, limit: int):
        return self.session.query(Client).filter(
            Client.tenant_id == tenant_id,
            Client.last_visit_at.isnot(None),
            Client.last_visit_at < visited_before
        ).order_by(Client.last_visit_at.asc(), Client.id).limit(limit).all()

    def list_recent_clients(self, tenant_id, created_since: datetime, limit: int):
        return self.session.query(Client).filter(
            Client.tenant_id == tenant_id,
            Client.created_at >= created_since
        ).order_by(Client.created_at.desc(), Client.id.desc()).limit(limit).all()

    # --- Sales ---

    def count_completed_sales(self, client_id):
        return self.session.query(func.count(Sale.id)).filter(
            Sale.client_id == client_id,
            Sale.status == SaleStatus.COMPLETED.value
        ).scalar() or 0

    # --- Tags ---

    def list_tags(self, tenant_id):
        usage_subq = self.session.query(
            ClientTagAssignment.tag_id,
            func.count(ClientTagAssignment.id).label('usage_count')
        ).group_by(
            ClientTagAssignment.tag_id
        ).subquery()

        rows = self.session.query(
            ClientTag,
            func.coalesce(usage_subq.c.usage_count, 0)
        ).outerjoin(
            usage_subq, usage_subq.c.tag_id == ClientTag.id
        ).filter(
            ClientTag.tenant_id == tenant_id
        ).order_by(ClientTag.name).all()

        return [(tag, int(count)) for tag, count in rows]

    def list_auto_apply_tags(self, tenant_id):
        return self.session.query(ClientTag).filter(
            ClientTag.tenant_id == tenant_id,
            ClientTag.auto_apply == True  # noqa: E712
        ).order_by(ClientTag.id).all()

    def get_tag(self, tenant_id, tag_id):
        return self.session.query(ClientTag).filter(
            ClientTag.tenant_id == tenant_id,
            ClientTag.id == tag_id
        ).first()

    def find_tag_by_name(self, tenant_id, name):
        return self.session.query(ClientTag).filter(
            ClientTag.tenant_id == tenant_id,
            ClientTag.name == name
        ).first()

    def insert_tag_if_absent(self, tenant_id, name, color, auto_apply=False, auto_apply_rule=None):
        existing = self.find_tag_by_name(tenant_id, name)
        if existing:
            return existing, False

        tag = ClientTag(
            tenant_id=tenant_id,
            name=name,
            color=color,
            auto_apply=auto_apply,
            auto_apply_rule=auto_apply_rule
        )
        try:
            with self.session.begin_nested():
                self.session.add(tag)
        except IntegrityError:
            # Race condition: another request created the same name first
            logger.info(f"Tag '{name}' created concurrently for tenant {tenant_id}, reusing it")
            existing = self.find_tag_by_name(tenant_id, name)
            if existing is None:
                raise
            return existing, False
        return tag, True

    def update_tag(self, tag_id, update: TagUpdate):
        tag = self.session.get(ClientTag, tag_id)
        if tag is None:
            return
        for field_name, value in update.changes().items():
            setattr(tag, field_name, value)
        self.session.flush()

    def delete_tag(self, tag_id):
        tag = self.session.get(ClientTag, tag_id)
        if tag is not None:
            self.session.delete(tag)
            self.session.flush()

    # --- Tag assignments ---

    def list_client_assignments(self, client_id):
        return self.session.query(ClientTagAssignment).options(
            joinedload(ClientTagAssignment.tag)
        ).filter(
            ClientTagAssignment.client_id == client_id
        ).order_by(ClientTagAssignment.assigned_at, ClientTagAssignment.id).all()

    def assign_tag_if_absent(self, client_id, tag_id):
        try:
            with self.session.begin_nested():
                self.session.add(ClientTagAssignment(client_id=client_id, tag_id=tag_id))
        except IntegrityError:
            # Only a duplicate pair means "already assigned"; a missing client or tag is an error
            if not self._assignment_exists(client_id, tag_id):
                raise
            return False
        return True

    def _assignment_exists(self, client_id, tag_id):
        return self.session.query(ClientTagAssignment.id).filter(
            ClientTagAssignment.client_id == client_id,
            ClientTagAssignment.tag_id == tag_id
        ).first() is not None

    def remove_tag_assignment(self, client_id, tag_id):
        deleted = self.session.query(ClientTagAssignment).filter(
            ClientTagAssignment.client_id == client_id,
            ClientTagAssignment.tag_id == tag_id
        ).delete(synchronize_session='fetch')
        return deleted > 0

    def count_tag_assignments(self, tag_id):
        return self.session.query(func.count(ClientTagAssignment.id)).filter(
            ClientTagAssignment.tag_id == tag_id
        ).scalar() or 0

    def move_tag_assignments(self, from_tag_id, to_tag_id):
        moved = 0
        assignments: List[ClientTagAssignment] = self.session.query(ClientTagAssignment).filter(
            ClientTagAssignment.tag_id == from_tag_id
        ).all()
        for assignment in assignments:
            if self.assign_tag_if_absent(assignment.client_id, to_tag_id):
                moved += 1
            self.session.delete(assignment)
        self.session.flush()
        return moved

    # --- Tenants ---

    def list_tenants(self):
        return self.session.query(Tenant).order_by(Tenant.created_at, Tenant.id).all()


def get_store(session: Optional[Session] = None) -> SqlAlchemyCrmStore:
    """Store bound to the given session, or to the request-scoped one."""
    if session is None:
        from app.database import get_session
        session = get_session()
    return SqlAlchemyCrmStore(session)
