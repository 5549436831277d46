# accounts/services.py
"""
Password recovery: reset links by email and the password update that
consumes them.
"""
import logging
from typing import Optional
from urllib.parse import urlencode

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core.cache import cache
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template import Context, Template
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken

logger = logging.getLogger(__name__)

User = get_user_model()

RESET_RATE_PER_EMAIL = getattr(settings, "PASSWORD_RESET_RATE_PER_EMAIL", 3)
RESET_RATE_PER_IP = getattr(settings, "PASSWORD_RESET_RATE_PER_IP", 10)
RESET_RATE_WINDOW = getattr(settings, "PASSWORD_RESET_RATE_WINDOW", 900)

RESET_SUBJECT = "Reset your WEAR console password"
RESET_TEXT_BODY = (
    "{% autoescape off %}Hello {{ name }},\n\n"
    "Use the link below to set a new password for the WEAR admin console:\n"
    "{{ link }}\n\n"
    "If you did not request this, you can ignore this email.\n{% endautoescape %}"
)
RESET_HTML_BODY = """
    <div style="font-family: Arial, sans-serif; color: #111; padding: 16px;">
      <p>Hello {{ name }},</p>
      <p>Use the button below to set a new password for the WEAR admin console.</p>
      <p>
        <a href="{{ link }}" style="background:#4f46e5;color:#fff;padding:10px 16px;border-radius:8px;text-decoration:none;">Update password</a>
      </p>
      <p style="color:#555;">If you did not request this, you can ignore this email.</p>
    </div>
"""


class PasswordResetRateLimited(Exception):
    pass


def _rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """Returns True if over limit."""
    current = cache.get(key)
    if current is None:
        cache.set(key, 1, timeout=window_seconds)
        return False
    current = current + 1
    cache.set(key, current, timeout=window_seconds)
    return current > limit


def build_reset_link(user) -> str:
    params = urlencode({
        "uid": urlsafe_base64_encode(force_bytes(user.pk)),
        "token": default_token_generator.make_token(user),
    })
    return f"{settings.CONSOLE_FRONTEND_URL}/update-password?{params}"


def send_password_reset_email(user) -> bool:
    """Render and send the reset link. Delivery failures are logged, not raised."""
    profile = getattr(user, "staff_profile", None)
    context = Context({
        "name": (profile.full_name if profile else "") or user.get_full_name() or user.email,
        "link": build_reset_link(user),
    })
    msg = EmailMultiAlternatives(
        subject=RESET_SUBJECT,
        body=Template(RESET_TEXT_BODY).render(context),
        to=[user.email],
    )
    msg.attach_alternative(Template(RESET_HTML_BODY).render(context), "text/html")
    try:
        msg.send(fail_silently=False)
    except OSError:
        logger.exception("Failed to send password reset email to %s", user.email)
        return False
    logger.info("Password reset email sent to user %s", user.pk)
    return True


def request_password_reset(email: str, ip: Optional[str] = None) -> bool:
    """
    Send a reset link when ``email`` belongs to an active account.

    Returns whether an email went out; callers must not reveal it. Raises
    PasswordResetRateLimited when the email or IP asked too often.
    """
    email = (email or "").strip().lower()
    if _rate_limit(f"pwreset:email:{email}", RESET_RATE_PER_EMAIL, RESET_RATE_WINDOW):
        raise PasswordResetRateLimited("Too many reset requests for this email. Please wait a few minutes.")
    if ip and _rate_limit(f"pwreset:ip:{ip}", RESET_RATE_PER_IP, RESET_RATE_WINDOW):
        raise PasswordResetRateLimited("Too many reset requests from this IP. Please wait a few minutes.")

    user = User.objects.filter(email__iexact=email, is_active=True).order_by("id").first()
    if user is None:
        logger.info("Password reset requested for an unknown email")
        return False
    return send_password_reset_email(user)


def resolve_reset_user(uid: str, token: str):
    """User for a valid, unexpired reset link, else None."""
    try:
        pk = force_str(urlsafe_base64_decode(uid))
        user = User.objects.get(pk=pk, is_active=True)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        return None
    if not default_token_generator.check_token(user, token):
        return None
    return user


@transaction.atomic
def reset_password(user, password: str) -> None:
    """
    Set the new password and sign the account out everywhere by
    blacklisting its outstanding refresh tokens.
    """
    user.set_password(password)
    user.save(update_fields=["password"])
    for token in OutstandingToken.objects.filter(user=user):
        BlacklistedToken.objects.get_or_create(token=token)
    logger.info("Password updated for user %s", user.pk)
