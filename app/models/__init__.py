"""Models package - exports all SQLAlchemy models."""
# SaaS Core Models
from app.models.admin_user import AdminUser
from app.models.app_user import AppUser
from app.models.tenant import Tenant, SubscriptionTier, SubscriptionStatus
from app.models.user_tenant import UserTenant, UserRole

# CRM Models
from app.models.client import Client
from app.models.client_tag import ClientTag, AutoApplyRule, TAG_NAME_MAX_LENGTH
from app.models.client_tag_assignment import ClientTagAssignment
from app.models.sale import Sale, SaleStatus

__all__ = [
    # SaaS Core
    'AdminUser', 'AppUser', 'Tenant', 'SubscriptionTier', 'SubscriptionStatus',
    'UserTenant', 'UserRole',
    # CRM
    'Client', 'ClientTag', 'AutoApplyRule', 'TAG_NAME_MAX_LENGTH', 'ClientTagAssignment',
    'Sale', 'SaleStatus',
]
