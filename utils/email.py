import logging
from flask_mail import Message
from extensions import mail

logger = logging.getLogger(__name__)


def send_email(to, subject, body):
    """Sends an email using Flask-Mail."""
    msg = Message(subject=subject, recipients=[to], body=body)
    try:
        mail.send(msg)
        return True
    except Exception:
        logger.exception("Failed to send email to %s", to)
        return False
