"""
Core Celery Tasks

Background tasks for SMS and email delivery plus system health checks.
"""
from celery import shared_task
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def send_sms_async(self, phone_number: str, message: str):
    """
    Send SMS asynchronously via Celery.

    Use this instead of direct SMS sending to avoid blocking requests.

    Usage:
        from core.tasks import send_sms_async
        send_sms_async.delay('+2348031234567', 'Your message here')
    """
    from core.sms_service import get_sms_service, SMSDeliveryError

    try:
        result = get_sms_service().send_sms(phone_number=phone_number, message=message)
        logger.info(f"SMS sent to ****{phone_number[-4:]}: {result.get('status')}")
        return result
    except SMSDeliveryError as exc:
        logger.error(f"SMS sending failed: {exc}")
        # Retry with exponential backoff
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))


@shared_task(bind=True, max_retries=3)
def send_email_async(self, subject: str, message: str, recipient_list: list, html_message: str = None):
    """
    Send email asynchronously via Celery.

    Usage:
        from core.tasks import send_email_async
        send_email_async.delay(
            'Subject',
            'Plain text message',
            ['user@example.com'],
            html_message='<h1>HTML content</h1>'
        )
    """
    from django.core.mail import send_mail
    from django.conf import settings

    try:
        result = send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=recipient_list,
            html_message=html_message,
            fail_silently=False,
        )
        logger.info(f"Email sent to {recipient_list}: {result}")
        return result
    except Exception as exc:
        logger.error(f"Email sending failed: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))


def check_system_health():
    """
    Build a health report for the database and the cache.

    Used by the health endpoint.
    """
    from django.db import connection, DatabaseError
    from django.core.cache import cache

    report = {
        'timestamp': timezone.now().isoformat(),
        'database': 'healthy',
        'cache': 'healthy',
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as exc:
        report['database'] = f'unhealthy: {exc}'

    cache.set('health_check', 'ok', 10)
    if cache.get('health_check') != 'ok':
        report['cache'] = 'unhealthy: cache not responding'

    report['status'] = (
        'healthy'
        if report['database'] == 'healthy' and report['cache'] == 'healthy'
        else 'degraded'
    )
    return report
