"""Sale model."""
from sqlalchemy import Column, BigInteger, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId
import enum


class SaleStatus(str, enum.Enum):
    """Sale status enum."""
    DRAFT = 'draft'
    COMPLETED = 'completed'
    VOIDED = 'voided'


class Sale(Base):
    """Sale rung up at the POS; only completed sales count toward client history."""

    __tablename__ = 'sale'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id', ondelete='CASCADE'), nullable=False, index=True)
    client_id = Column(BigInteger, ForeignKey('client.id'), nullable=True, index=True)
    total = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=SaleStatus.COMPLETED.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    tenant = relationship('Tenant')
    client = relationship('Client', back_populates='sales')

    def __repr__(self):
        return f"<Sale(id={self.id}, total={self.total}, status={self.status})>"
