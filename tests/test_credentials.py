"""
Tests for the admin credential: hashing, bootstrap, reconciliation and rotation
"""
import pytest

from conftest import DEFAULT_PASSWORD, DEFAULT_USERNAME, NEW_PASSWORD


def test_verify_accepts_the_hashed_password_only():
    from services.credentials import derive_hash, verify

    password_hash, salt = derive_hash('s3cret-passphrase')
    assert len(salt) == 32
    assert len(password_hash) == 128
    assert verify('s3cret-passphrase', password_hash, salt)
    assert not verify('s3cret-passphrase!', password_hash, salt)
    assert not verify('', password_hash, salt)


def test_derive_hash_uses_a_fresh_salt_each_time():
    from services.credentials import derive_hash

    first, first_salt = derive_hash('same password')
    second, second_salt = derive_hash('same password')
    assert first_salt != second_salt
    assert first != second
    assert derive_hash('same password', first_salt) == (first, first_salt)


def test_verify_rejects_malformed_hash():
    from services.credentials import verify

    assert not verify('anything', 'not-hex', 'salt')


class TestCredentialManager:
    def test_bootstrap_creates_admin_pending_rotation(self, app_ctx):
        credentials = app_ctx.credential_manager
        admin = credentials.get_admin()
        assert admin.username == DEFAULT_USERNAME
        assert admin.must_change_password is True
        assert credentials.is_using_default_credentials()
        assert credentials.must_change_password()

    def test_authenticate(self, app_ctx):
        credentials = app_ctx.credential_manager
        assert credentials.authenticate(DEFAULT_USERNAME, DEFAULT_PASSWORD) is not None
        assert credentials.authenticate(DEFAULT_USERNAME, 'wrong') is None
        assert credentials.authenticate('someone-else', DEFAULT_PASSWORD) is None

    def test_reconcile_removes_admins_under_other_usernames(self, app_ctx):
        from repositories.admin_user_repository import AdminUserRepository
        from services.credentials import derive_hash

        password_hash, salt = derive_hash('old password here')
        AdminUserRepository.create('old-admin', password_hash, salt, must_change_password=False)
        assert AdminUserRepository.count() == 2

        app_ctx.credential_manager.reconcile_admin_identity()

        usernames = [user.username for user in AdminUserRepository.get_all()]
        assert usernames == [DEFAULT_USERNAME]

    def test_default_password_forces_rotation_again(self, app_ctx):
        from repositories.admin_user_repository import AdminUserRepository

        credentials = app_ctx.credential_manager
        AdminUserRepository.set_must_change_password(DEFAULT_USERNAME, False)
        assert not credentials.must_change_password()

        credentials.ensure_bootstrap_credential()
        assert credentials.must_change_password()

    @pytest.mark.parametrize('current, new, confirm, message', [
        ('', NEW_PASSWORD, NEW_PASSWORD, 'All fields are required'),
        (DEFAULT_PASSWORD, NEW_PASSWORD, NEW_PASSWORD + 'x', 'Passwords do not match'),
        (DEFAULT_PASSWORD, 'short', 'short', 'Password must be at least 12 characters'),
    ])
    def test_change_password_validation(self, app_ctx, current, new, confirm, message):
        from exceptions import ValidationError

        with pytest.raises(ValidationError) as exc_info:
            app_ctx.credential_manager.change_password(current, new, confirm)
        assert exc_info.value.message == message
        assert app_ctx.credential_manager.must_change_password()

    def test_change_password_requires_current_password(self, app_ctx):
        from exceptions import AuthError

        with pytest.raises(AuthError) as exc_info:
            app_ctx.credential_manager.change_password('not the password', NEW_PASSWORD, NEW_PASSWORD)
        assert exc_info.value.message == 'Current password is incorrect'

    def test_change_password_clears_rotation_flag(self, app_ctx):
        credentials = app_ctx.credential_manager
        credentials.change_password(DEFAULT_PASSWORD, NEW_PASSWORD, NEW_PASSWORD)

        assert not credentials.must_change_password()
        assert not credentials.is_using_default_credentials()
        assert credentials.authenticate(DEFAULT_USERNAME, NEW_PASSWORD) is not None
        assert credentials.authenticate(DEFAULT_USERNAME, DEFAULT_PASSWORD) is None

    def test_reset_password(self, app_ctx):
        from exceptions import ValidationError

        credentials = app_ctx.credential_manager
        credentials.reset_password('operator chosen secret', require_change=True)
        assert credentials.authenticate(DEFAULT_USERNAME, 'operator chosen secret') is not None
        assert credentials.must_change_password()

        with pytest.raises(ValidationError):
            credentials.reset_password('tiny')


def test_reset_password_script(app):
    from scripts.reset_password import reset_password

    assert reset_password('from the command line', hub_app=app)
    assert not reset_password('tiny', hub_app=app)

    with app.app_context():
        credentials = app.credential_manager
        assert credentials.authenticate(DEFAULT_USERNAME, 'from the command line') is not None
        assert not credentials.must_change_password()
