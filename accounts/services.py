"""
Account services: password reset tokens.
"""

import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from core.tasks import send_email_async

logger = logging.getLogger(__name__)
User = get_user_model()

RESET_TOKEN_LIFETIME = timedelta(hours=1)


class PasswordResetService:
    """Handle password reset functionality."""

    @staticmethod
    def generate_reset_token():
        return secrets.token_hex(32)

    @classmethod
    def send_password_reset_email(cls, user):
        """Store a fresh reset token on ``user`` and queue the reset email."""
        token = cls.generate_reset_token()
        user.password_reset_token = token
        user.password_reset_token_expires = timezone.now() + RESET_TOKEN_LIFETIME
        user.save(update_fields=['password_reset_token', 'password_reset_token_expires', 'updated_at'])

        reset_url = f"{settings.FRONTEND_URL}/auth/reset-password?token={token}"
        message = (
            f"Hello {user.get_full_name() or user.username},\n\n"
            "We received a request to reset your CCSA Farmer Registry password.\n\n"
            f"Use the link below to choose a new password:\n{reset_url}\n\n"
            "This link expires in 1 hour. If you did not ask for a reset, ignore this email.\n"
        )
        send_email_async.delay('Reset your password - CCSA Farmer Registry', message, [user.email])
        logger.info(f"Password reset email queued for {user.email}")
        return token

    @classmethod
    def verify_reset_token(cls, token):
        try:
            user = User.objects.get(password_reset_token=token)
        except User.DoesNotExist:
            return None, "Invalid password reset token"

        if not user.password_reset_token_expires or user.password_reset_token_expires < timezone.now():
            return None, "Password reset token has expired"
        return user, None

    @classmethod
    def reset_password(cls, token, new_password):
        """Set ``new_password`` for the token's owner. Tokens are single use."""
        user, error = cls.verify_reset_token(token)
        if error:
            return False, error

        user.set_password(new_password)
        user.password_reset_token = None
        user.password_reset_token_expires = None
        user.save()
        logger.info(f"Password reset completed for {user.email}")
        return True, None
