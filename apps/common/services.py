import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


class EmailService:
    """Gửi email (text + HTML) qua EMAIL_BACKEND của Django."""

    def __init__(self, from_email=None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send(self, to, subject, html_body, text_body=None) -> bool:
        recipients = [to] if isinstance(to, str) else list(to)
        recipients = [r for r in recipients if r]
        if not recipients:
            return False
        message = EmailMultiAlternatives(
            subject=subject,
            body=text_body if text_body is not None else strip_tags(html_body),
            from_email=self.from_email,
            to=recipients,
        )
        message.attach_alternative(html_body, "text/html")
        message.send(fail_silently=False)
        logger.info("Sent email '%s' to %s", subject, ", ".join(recipients))
        return True

    def send_template(self, to, subject_template, body_template, context) -> bool:
        subject = render_to_string(subject_template, context).strip()
        html_body = render_to_string(body_template, context)
        return self.send(to, subject, html_body)
