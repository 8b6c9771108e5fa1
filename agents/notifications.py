"""
Agent status notifications.

A pipeline status change emails the applicant through the Celery email task
and texts a short notice to their phone when it is a valid Nigerian number.
Statuses without a template (active, inactive, Applied) send nothing.
"""

import logging

from django.conf import settings

logger = logging.getLogger(__name__)

STATUS_EMAILS = {
    'CallForInterview': {
        'subject': 'Update on your Field Agent Application',
        'title': 'Invitation for Interview',
        'message': (
            'We are pleased to inform you that your application has been reviewed '
            'and you have been shortlisted for an interview. Our team will contact '
            'you shortly with the date, time and venue.'
        ),
    },
    'Accepted': {
        'subject': 'Congratulations! Application Accepted',
        'title': 'Application Accepted',
        'message': (
            'Congratulations! Your application to become a Field Agent has been '
            'accepted. You will receive onboarding instructions soon.'
        ),
    },
    'Rejected': {
        'subject': 'Update on your Application',
        'title': 'Application Status',
        'message': (
            'Thank you for your interest in becoming a Field Agent. After careful '
            'review we are unable to move forward with your application at this time.'
        ),
    },
    'Enrolled': {
        'subject': 'Welcome to the Team! Account Active',
        'title': 'Welcome Aboard',
        'message': (
            'Your Field Agent account is now active. You can sign in to the '
            'registry and begin registering farmers.'
        ),
    },
}


def build_status_email(name, status):
    """Return (subject, text, html) for ``status`` or None when no email applies."""
    template = STATUS_EMAILS.get(status)
    if template is None:
        return None

    organization = getattr(settings, 'CERTIFICATE_ORGANIZATION', '')
    text = f"Dear {name},\n\n{template['message']}\n\n{organization}"
    html = (
        f"<h2>{template['title']}</h2>"
        f"<p>Dear {name},</p>"
        f"<p>{template['message']}</p>"
        f"<p>{organization}</p>"
    )
    return template['subject'], text, html


def notify_status_change(agent, status):
    """
    Queue the status email for ``agent``.

    Returns:
        bool: True when an email was queued
    """
    from core.sms_service import format_nigerian_phone_number, is_valid_nigerian_phone_number
    from core.tasks import send_email_async, send_sms_async

    if not agent.email:
        return False

    email = build_status_email(agent.first_name or agent.full_name, status)
    if email is None:
        return False

    subject, text, html = email
    send_email_async.delay(subject, text, [agent.email], html_message=html)
    logger.info(f"Queued '{status}' status email for agent {agent.id}")

    phone = format_nigerian_phone_number(agent.phone) if agent.phone else ''
    if is_valid_nigerian_phone_number(phone):
        send_sms_async.delay(phone, f"{subject}. Details have been sent to {agent.email}.")

    return True
