from fastapi import APIRouter, Depends
from app.core.dependencies import require_admin, get_admin_client
from app.modules.user_admin.schemas import (
    ActionResult, ChangeEmailRequest, EmailRequest,
    InviteUserRequest, UpdateAppMetadataRequest
)
from app.modules.user_admin.service import UserAdminService
from supabase import Client

router = APIRouter(
    prefix="/admin/users",
    tags=["user-admin"],
    dependencies=[Depends(require_admin)],
)


def get_user_admin_service(admin_client: Client = Depends(get_admin_client)) -> UserAdminService:
    return UserAdminService(admin_client)


@router.put("/{user_id}/email", response_model=ActionResult, response_model_exclude_none=True)
async def change_user_email(
    user_id: str,
    body: ChangeEmailRequest,
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Change a user's auth email and mirror it into profiles"""
    return service.change_user_email(user_id, body.new_email)


@router.post("/password-reset", response_model=ActionResult, response_model_exclude_none=True)
async def send_password_reset(
    body: EmailRequest,
    service: UserAdminService = Depends(get_user_admin_service)
):
    return service.send_password_reset(body.email)


@router.post("/reauthenticate", response_model=ActionResult, response_model_exclude_none=True)
async def request_reauthentication(
    body: EmailRequest,
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Email a one-time login link to an existing user"""
    return service.request_reauthentication(body.email)


@router.post("/magic-link", response_model=ActionResult, response_model_exclude_none=True)
async def send_magic_link(
    body: EmailRequest,
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Email a one-time login link, creating the user if needed"""
    return service.send_magic_link(body.email)


@router.post("/invite", response_model=ActionResult, response_model_exclude_none=True)
async def invite_user(
    body: InviteUserRequest,
    service: UserAdminService = Depends(get_user_admin_service)
):
    return service.invite_user(body.email, body.role)


@router.delete("/{user_id}", response_model=ActionResult, response_model_exclude_none=True)
async def delete_user(
    user_id: str,
    service: UserAdminService = Depends(get_user_admin_service)
):
    return service.delete_user(user_id)


@router.put("/{user_id}/app-metadata", response_model=ActionResult, response_model_exclude_none=True)
async def update_user_app_metadata(
    user_id: str,
    body: UpdateAppMetadataRequest,
    service: UserAdminService = Depends(get_user_admin_service)
):
    return service.update_user_app_metadata(user_id, body.role)


@router.post("/sync-app-metadata", response_model=ActionResult, response_model_exclude_none=True)
async def sync_all_users_app_metadata(
    service: UserAdminService = Depends(get_user_admin_service)
):
    """Copy every profiles.role into the matching user's app_metadata"""
    return service.sync_all_users_app_metadata()
