"""Join between clients and tags."""
from sqlalchemy import Column, BigInteger, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId


class ClientTagAssignment(Base):
    """A tag attached to a client. One row per (client, tag) pair."""

    __tablename__ = 'client_tag_assignment'
    __table_args__ = (
        UniqueConstraint('client_id', 'tag_id', name='uq_client_tag_assignment'),
    )

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    client_id = Column(BigInteger, ForeignKey('client.id', ondelete='CASCADE'), nullable=False, index=True)
    tag_id = Column(BigInteger, ForeignKey('client_tag.id', ondelete='CASCADE'), nullable=False, index=True)
    assigned_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    client = relationship('Client', back_populates='tag_assignments')
    tag = relationship('ClientTag', back_populates='assignments')

    def __repr__(self):
        return f"<ClientTagAssignment(client_id={self.client_id}, tag_id={self.tag_id})>"
