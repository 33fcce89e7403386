"""Storage port and its implementations."""
from app.repositories.base import CrmStore, ClientUpdate, TagUpdate, UNSET
from app.repositories.sqlalchemy_store import SqlAlchemyCrmStore

__all__ = ['CrmStore', 'ClientUpdate', 'TagUpdate', 'UNSET', 'SqlAlchemyCrmStore']
