"""
Core Models Package.

Exports database models for use across the application.
"""

from core.models.admin_user import AdminUser
from core.models.session import AdminSession

__all__ = ["AdminUser", "AdminSession"]
