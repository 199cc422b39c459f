"""
Core dependencies for route protection and admin client acquisition
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, get_supabase_admin, ServiceRoleNotConfigured
from app.modules.auth.service import AuthService
from app.modules.user_admin.schemas import UserRole
from supabase import Client
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def is_admin(user_data: dict) -> bool:
    """Check role in app_metadata (server-set, users cannot modify it)"""
    app_metadata = user_data.get("app_metadata") or {}
    return app_metadata.get("role") == UserRole.ADMIN.value


def require_admin(user_data: dict = Depends(get_current_user_id)) -> dict:
    """Dependency rejecting callers whose app_metadata role is not admin"""
    if not is_admin(user_data):
        logger.warning(f"Non-admin user {user_data.get('id')} attempted an admin action")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )
    return user_data


def get_admin_client() -> Client:
    """Service-role client; every admin action is handed this explicitly"""
    try:
        return get_supabase_admin()
    except ServiceRoleNotConfigured as e:
        logger.error(str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
