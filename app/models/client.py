"""Client model."""
from sqlalchemy import Column, BigInteger, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId


class Client(Base):
    """Client of a tenant (walk-in, waiver signer or returning customer)."""

    __tablename__ = 'client'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id', ondelete='CASCADE'), nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    birthday = Column(Date, nullable=True)
    last_visit_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    tenant = relationship('Tenant', back_populates='clients')
    sales = relationship('Sale', back_populates='client')
    tag_assignments = relationship('ClientTagAssignment', back_populates='client', cascade='all, delete-orphan')

    @property
    def name(self):
        """Display name: first and last name joined, blanks dropped."""
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}')>"
