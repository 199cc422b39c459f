import logging
from supabase import Client
from postgrest.exceptions import APIError
from supabase_auth.errors import AuthError
from app.config import settings
from app.modules.user_admin.schemas import ActionResult, UserRole
from typing import Any, Callable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Errors the Supabase SDK raises when the service itself rejects a request
SERVICE_ERRORS = (AuthError, APIError)


def _error_text(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc)


def _role_value(role: Union[UserRole, str]) -> str:
    return UserRole(role).value


class UserAdminService:
    """Administrative user actions backed by the Supabase service-role client.

    Every public method returns an ActionResult and never raises: errors
    reported by Supabase and unexpected exceptions are both logged and folded
    into ``success=False`` results.
    """

    def __init__(self, supabase: Client, site_url: Optional[str] = None):
        self.supabase = supabase
        self.site_url = (site_url or settings.site_url).rstrip("/")

    def _redirect(self, path: str) -> str:
        return f"{self.site_url}{path}"

    def _perform(
        self,
        action: str,
        failure_message: str,
        unexpected_message: str,
        operation: Callable[[], ActionResult],
    ) -> ActionResult:
        try:
            return operation()
        except SERVICE_ERRORS as e:
            logger.error(f"Error {action}: {_error_text(e)}")
            return ActionResult.failed(failure_message, _error_text(e))
        except Exception as e:
            logger.exception(f"Unexpected error {action}: {e}")
            return ActionResult.failed(unexpected_message, _error_text(e))

    @staticmethod
    def _best_effort(description: str, effect: Callable[[], Any]) -> bool:
        """Run a non-authoritative write; failure is logged, never propagated."""
        try:
            effect()
            return True
        except Exception as e:
            logger.warning(f"{description} failed: {_error_text(e)}")
            return False

    def change_user_email(self, user_id: str, new_email: str) -> ActionResult:
        """Change the auth email, then mirror it into profiles."""
        def operation() -> ActionResult:
            self.supabase.auth.admin.update_user_by_id(user_id, {"email": new_email})

            mirrored = self._best_effort(
                f"Profile email update for user {user_id}",
                lambda: self.supabase.table("profiles")
                .update({"email": new_email})
                .eq("id", user_id)
                .execute(),
            )
            if not mirrored:
                logger.warning("Profile email update failed, but auth email was updated successfully")

            return ActionResult.ok(
                f"Email successfully changed to {new_email}. User will receive a confirmation email."
            )

        return self._perform(
            "changing user email",
            "Failed to change user email",
            "An unexpected error occurred while changing the email",
            operation,
        )

    def send_password_reset(self, email: str) -> ActionResult:
        def operation() -> ActionResult:
            self.supabase.auth.reset_password_for_email(
                email,
                {"redirect_to": self._redirect(settings.password_reset_path)},
            )
            return ActionResult.ok(f"Password reset link has been sent to {email}")

        return self._perform(
            "sending password reset",
            "Failed to send password reset email",
            "An unexpected error occurred while sending password reset",
            operation,
        )

    def _send_otp(self, email: str, create_user: bool) -> None:
        self.supabase.auth.sign_in_with_otp({
            "email": email,
            "options": {
                "should_create_user": create_user,
                "email_redirect_to": self._redirect(settings.otp_redirect_path),
            },
        })

    def request_reauthentication(self, email: str) -> ActionResult:
        """Send a one-time login link to an existing user only."""
        def operation() -> ActionResult:
            self._send_otp(email, create_user=False)
            return ActionResult.ok(f"Reauthentication link has been sent to {email}")

        return self._perform(
            "sending reauthentication request",
            "Failed to send reauthentication link",
            "An unexpected error occurred while sending reauthentication request",
            operation,
        )

    def send_magic_link(self, email: str) -> ActionResult:
        """Send a one-time login link, creating the user if absent."""
        def operation() -> ActionResult:
            self._send_otp(email, create_user=True)
            return ActionResult.ok(f"Magic link has been sent to {email}")

        return self._perform(
            "sending magic link",
            "Failed to send magic link",
            "An unexpected error occurred while sending magic link",
            operation,
        )

    def invite_user(self, email: str, role: Union[UserRole, str] = UserRole.CLIENT) -> ActionResult:
        """Invite a user with role in both user_metadata (legacy) and app_metadata.

        The invite call only accepts user_metadata, so app_metadata is written
        on the new identity right after. A failure there leaves the invite in
        place; sync_all_users_app_metadata repairs the drift.
        """
        def operation() -> ActionResult:
            role_name = _role_value(role)
            response = self.supabase.auth.admin.invite_user_by_email(
                email,
                {
                    "data": {"role": role_name},
                    "redirect_to": self._redirect(settings.invite_redirect_path),
                },
            )

            invited = getattr(response, "user", None)
            if invited is not None:
                self._best_effort(
                    f"Setting app_metadata for invited user {email}",
                    lambda: self.supabase.auth.admin.update_user_by_id(
                        invited.id, {"app_metadata": {"role": role_name}}
                    ),
                )
            else:
                logger.warning(f"Invite for {email} returned no user; app_metadata not set")

            return ActionResult.ok(f"Invitation sent successfully to {email}")

        return self._perform(
            "inviting user",
            "Failed to send invitation",
            "An unexpected error occurred while sending invitation",
            operation,
        )

    def delete_user(self, user_id: str) -> ActionResult:
        def operation() -> ActionResult:
            self.supabase.auth.admin.delete_user(user_id)
            return ActionResult.ok("User account has been successfully deleted")

        return self._perform(
            "deleting user",
            "Failed to delete user account",
            "An unexpected error occurred while deleting user",
            operation,
        )

    def update_user_app_metadata(self, user_id: str, role: Union[UserRole, str]) -> ActionResult:
        def operation() -> ActionResult:
            role_name = _role_value(role)
            self.supabase.auth.admin.update_user_by_id(
                user_id, {"app_metadata": {"role": role_name}}
            )
            return ActionResult.ok(f"User app_metadata successfully updated with role: {role_name}")

        return self._perform(
            "updating user app_metadata",
            "Failed to update user app_metadata",
            "An unexpected error occurred while updating user app_metadata",
            operation,
        )

    def _sync_profiles(self, profiles: List[dict]) -> Tuple[int, int, List[str]]:
        """Push each profile's role into app_metadata, one user at a time."""
        success_count = 0
        error_count = 0
        errors: List[str] = []

        for profile in profiles:
            user_id = profile.get("id")
            try:
                self.supabase.auth.admin.update_user_by_id(
                    user_id, {"app_metadata": {"role": profile.get("role")}}
                )
                success_count += 1
            except SERVICE_ERRORS as e:
                error_count += 1
                errors.append(f"Error updating user {user_id}: {_error_text(e)}")
            except Exception as e:
                error_count += 1
                errors.append(f"Exception updating user {user_id}: {_error_text(e)}")

        return success_count, error_count, errors

    def sync_all_users_app_metadata(self) -> ActionResult:
        """Copy profiles.role into every user's app_metadata.role.

        Only the profile read is fatal; per-user failures are counted and
        returned in ``errors`` while the batch still reports success.
        """
        try:
            result = self.supabase.table("profiles")\
                .select("id, role")\
                .execute()
        except SERVICE_ERRORS as e:
            logger.error(f"Error fetching profiles: {_error_text(e)}")
            return ActionResult.failed("Failed to fetch profiles", _error_text(e))
        except Exception as e:
            logger.exception(f"Unexpected error fetching profiles: {e}")
            return ActionResult.failed(
                "An unexpected error occurred while syncing user app_metadata", _error_text(e)
            )

        profiles = result.data or []
        if not profiles:
            return ActionResult.ok("No profiles found to sync")

        success_count, error_count, errors = self._sync_profiles(profiles)
        for detail in errors:
            logger.warning(detail)
        logger.info(f"app_metadata sync finished: {success_count} ok, {error_count} failed")
        return ActionResult.ok(
            f"Synced app_metadata for {success_count} users. {error_count} errors.",
            errors=errors,
        )
