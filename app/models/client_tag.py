"""Client tag model and its auto-apply rules."""
import enum
from sqlalchemy import Column, BigInteger, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId

TAG_NAME_MAX_LENGTH = 120


class AutoApplyRule(str, enum.Enum):
    """Rules that drive automatic tag assignment."""
    NEW_CLIENT = 'new_client'
    REPEAT_CLIENT = 'repeat_client'


class ClientTag(Base):
    """Label attachable to clients; unique by name within a tenant."""

    __tablename__ = 'client_tag'
    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='uq_client_tag_tenant_name'),
    )

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(TAG_NAME_MAX_LENGTH), nullable=False)
    color = Column(String(9), nullable=False, default='#6B7280')
    auto_apply = Column(Boolean, nullable=False, default=False)
    auto_apply_rule = Column(String(30), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    assignments = relationship('ClientTagAssignment', back_populates='tag', cascade='all, delete-orphan')

    def to_dict(self, usage_count=None):
        data = {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'name': self.name,
            'color': self.color,
            'auto_apply': bool(self.auto_apply),
            'auto_apply_rule': self.auto_apply_rule,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if usage_count is not None:
            data['usage_count'] = usage_count
        return data

    def __repr__(self):
        return f"<ClientTag(id={self.id}, name='{self.name}', rule={self.auto_apply_rule})>"
