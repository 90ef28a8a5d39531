"""
Service layer for the administrative credential: salted PBKDF2 hashes,
the forced-rotation flag and the single-admin reconciliation run at startup
"""
import hashlib
import hmac
import logging
import secrets
from typing import Optional, Tuple

from constants import PASSWORD_DIGEST, PASSWORD_ITERATIONS, PASSWORD_KEYLEN, PASSWORD_SALT_BYTES
from exceptions import AuthError, ValidationError
from repositories.admin_user_repository import AdminUserRepository

logger = logging.getLogger("main")


def derive_hash(password: str, salt: Optional[str] = None) -> Tuple[str, str]:
    """Return (hex digest, hex salt); a random salt is generated when none is given."""
    actual_salt = salt if salt is not None else secrets.token_hex(PASSWORD_SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        PASSWORD_DIGEST,
        password.encode("utf-8"),
        actual_salt.encode("utf-8"),
        PASSWORD_ITERATIONS,
        dklen=PASSWORD_KEYLEN,
    )
    return digest.hex(), actual_salt


def verify(password: str, password_hash: str, salt: str) -> bool:
    """Constant-time comparison of a candidate password against a stored hash."""
    try:
        candidate, _ = derive_hash(password, salt)
        candidate_bytes = bytes.fromhex(candidate)
        stored_bytes = bytes.fromhex(password_hash)
        if len(candidate_bytes) != len(stored_bytes):
            return False
        return hmac.compare_digest(candidate_bytes, stored_bytes)
    except Exception as e:
        logger.error(f"Failed to verify password: {e}")
        return False


class CredentialManager:
    """Owns the admin credential configured in settings"""

    def __init__(self, settings, repository=AdminUserRepository):
        self.username = settings.admin_username
        self.default_password = settings.default_admin_password
        self.min_password_length = settings.min_password_length
        self.repository = repository

    def get_admin(self):
        return self.repository.get_by_username(self.username)

    def reconcile_admin_identity(self):
        """Purge admins under any other username, then make sure the configured one exists."""
        for stale in self.repository.get_all():
            if stale.username != self.username:
                logger.info(f'Removing stale admin user "{stale.username}" (resetting to "{self.username}")')
                self.repository.delete(stale.username)
        self.ensure_bootstrap_credential()

    def ensure_bootstrap_credential(self):
        admin = self.get_admin()
        if admin is None:
            password_hash, salt = derive_hash(self.default_password)
            logger.info(f'Creating admin user "{self.username}" with default credentials')
            self.repository.create(self.username, password_hash, salt, must_change_password=True)
            return

        if not admin.must_change_password and verify(self.default_password, admin.password_hash, admin.salt):
            logger.info(f'Enforcing password rotation for "{self.username}"')
            self.repository.set_must_change_password(self.username, True)

    def is_using_default_credentials(self) -> bool:
        admin = self.get_admin()
        if admin is None:
            return True
        return verify(self.default_password, admin.password_hash, admin.salt)

    def warn_if_default_credentials(self):
        if self.is_using_default_credentials():
            logger.warning(
                f"Using default admin credentials for user {self.username}. "
                "You will be required to change your password on first login."
            )

    def must_change_password(self) -> bool:
        admin = self.get_admin()
        return bool(admin and admin.must_change_password)

    def authenticate(self, username: str, password: str):
        """Return the admin on a match, None otherwise (unknown user or bad password)."""
        if username != self.username:
            return None
        admin = self.get_admin()
        if admin is None or not verify(password, admin.password_hash, admin.salt):
            return None
        return admin

    def validate_new_password(self, new_password: str, confirm_password: str):
        if new_password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(new_password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters")

    def change_password(self, current_password: str, new_password: str, confirm_password: str):
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("All fields are required")
        self.validate_new_password(new_password, confirm_password)

        admin = self.get_admin()
        if admin is None or not verify(current_password, admin.password_hash, admin.salt):
            raise AuthError("Current password is incorrect")

        password_hash, salt = derive_hash(new_password)
        self.repository.update_password(self.username, password_hash, salt, must_change_password=False)
        logger.info(f"Password changed for admin user {self.username}")

    def reset_password(self, new_password: str, require_change: bool = False):
        """Operator reset, bypassing the current-password check."""
        if len(new_password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters")
        password_hash, salt = derive_hash(new_password)
        if self.get_admin() is None:
            self.repository.create(self.username, password_hash, salt, must_change_password=require_change)
        else:
            self.repository.update_password(self.username, password_hash, salt, must_change_password=require_change)
