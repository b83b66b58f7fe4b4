import logging
import datetime
import requests
from ..config import settings
from ..templating import templates

logger = logging.getLogger(__name__)

def send_notification_email(email: str, title: str, message: str | None) -> bool:
    """Sends a notification e-mail using the Mailgun API. Returns True when Mailgun accepted it."""
    if not settings.MAILGUN_API_KEY or not settings.MAILGUN_DOMAIN:
        logger.warning("Mailgun API key or domain not configured. Skipping email.")
        return False

    template_body = templates.get_template("emails/notification.html").render({
        "app_name": settings.APP_NAME,
        "title": title,
        "message": message or "",
        "dashboard_url": settings.BASE_URL,
        "current_year": datetime.datetime.now().year,
    })

    mailgun_url = f"https://api.mailgun.net/v3/{settings.MAILGUN_DOMAIN}/messages"
    auth = ("api", settings.MAILGUN_API_KEY)
    data = {
        "from": f"{settings.APP_NAME} <{settings.MAIL_FROM}>",
        "to": [email],
        "subject": f"{settings.APP_NAME}: {title}",
        "html": template_body,
    }

    try:
        response = requests.post(mailgun_url, auth=auth, data=data, timeout=10)
        response.raise_for_status()  # Raise an exception for bad status codes (4xx or 5xx)
        logger.info(f"Notification email '{title}' sent to {email} via Mailgun.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send notification email to {email} via Mailgun: {e}")
        return False
