import logging
import smtplib
from email.utils import formataddr, make_msgid

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string

from .errors import MailVerificationError
from .serializers import subject_label

logger = logging.getLogger("django")


def smtp_settings_summary(host=None, port=None):
    """SMTP settings safe to print or log (the password only as a flag)."""
    return {
        "host": host or settings.EMAIL_HOST,
        "port": port or settings.EMAIL_PORT,
        "user": settings.EMAIL_HOST_USER,
        "from": settings.CONTACT_FROM_EMAIL,
        "password_set": bool(settings.EMAIL_HOST_PASSWORD),
    }


def get_contact_connection(host=None, port=None):
    """
    Build an SMTP connection for the contact relay.

    Port 465 uses implicit TLS, every other port upgrades with STARTTLS. The
    same timeout covers connect, greeting and socket reads. The connection is
    not opened here; see ``verify_connection``.
    """
    host = host or settings.EMAIL_HOST
    port = int(port or settings.EMAIL_PORT)
    use_ssl = port == 465

    return get_connection(
        backend=settings.EMAIL_BACKEND,
        host=host,
        port=port,
        username=settings.EMAIL_HOST_USER,
        password=settings.EMAIL_HOST_PASSWORD,
        use_ssl=use_ssl,
        use_tls=not use_ssl,
        timeout=settings.CONTACT_SMTP_TIMEOUT,
        fail_silently=False,
    )


def verify_connection(connection):
    """Open the SMTP session (connect, EHLO, STARTTLS, LOGIN) without sending."""
    logger.info("Testing SMTP connection...")
    try:
        connection.open()
    except Exception as e:
        logger.error(f"SMTP verification failed: {e}", exc_info=True)
        raise MailVerificationError(e) from e
    logger.info("SMTP connection verified successfully")


def close_connection(connection):
    # QUIT failures are logged only; the send outcome stands.
    try:
        connection.close()
    except (smtplib.SMTPException, OSError) as e:
        logger.warning(f"Error closing SMTP connection: {e}")


def build_contact_email(submission, connection=None):
    name = submission["name"]
    email = submission["email"]
    label = subject_label(submission.get("subject"))

    if label:
        subject = f"Contact Form: {label} - {name}"
    else:
        subject = f"Contact Form: {name}"

    context = {
        "name": name,
        "email": email,
        "message": submission["message"],
        "subject_label": label,
    }

    from_email = settings.CONTACT_FROM_EMAIL
    domain = from_email.rpartition("@")[2] or None

    message = EmailMultiAlternatives(
        subject=subject,
        body=render_to_string("contact/email.txt", context),
        from_email=formataddr((settings.CONTACT_FROM_NAME, from_email)),
        to=[from_email],
        reply_to=[email],
        headers={"Message-ID": make_msgid(domain=domain)},
        connection=connection,
    )
    message.attach_alternative(
        render_to_string("contact/email.html", context), "text/html"
    )
    return message


def send_contact_email(submission):
    """
    Relay one validated submission.

    Verifies the connection first, then sends exactly once. Returns the
    ``Message-ID`` of the sent message. Verification failures are raised as
    ``MailVerificationError``; delivery failures propagate unchanged.
    """
    summary = smtp_settings_summary()
    logger.info(
        f"SMTP configuration: host={summary['host']} port={summary['port']} "
        f"user={summary['user']} from={summary['from']} "
        f"password set={summary['password_set']}"
    )

    connection = get_contact_connection()
    try:
        verify_connection(connection)

        message = build_contact_email(submission, connection)
        logger.info("Sending email...")
        if not message.send(fail_silently=False):
            raise smtplib.SMTPException("Message was not accepted for delivery")

        message_id = message.extra_headers["Message-ID"]
        logger.info(f"Email sent successfully: {message_id}")
        return message_id
    finally:
        close_connection(connection)
