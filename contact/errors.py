import smtplib
import socket
import ssl

EAUTH = "EAUTH"
ECONNECTION = "ECONNECTION"
ETIMEDOUT = "ETIMEDOUT"
ESOCKET = "ESOCKET"

SEND_FAILED = "Failed to send email"

# code -> (message, hint)
MAIL_ERRORS = {
    EAUTH: (
        "Authentication failed",
        "Check if you need an app-specific password for Zoho",
    ),
    ECONNECTION: (
        "Connection failed",
        "Check SMTP settings and firewall",
    ),
    ETIMEDOUT: (
        "Connection timed out",
        "Check network connectivity and firewall settings",
    ),
    ESOCKET: (
        "Socket error",
        "Possible TLS/SSL configuration issue",
    ),
}

VERIFY_AUTH_MESSAGE = (
    "Email authentication failed. "
    "Please check if app-specific password is configured in Zoho."
)
VERIFY_AUTH_HINT = (
    "You may need to generate an app-specific password in Zoho Mail settings"
)

SMTP_AUTH_FAILED = 535


class MailVerificationError(Exception):
    """The SMTP handshake failed before any message was sent."""

    def __init__(self, original):
        super().__init__(str(original))
        self.original = original


def unwrap(exc):
    if isinstance(exc, MailVerificationError):
        return exc.original
    return exc


def error_code(exc):
    """Map a transport exception to one of the short stable codes, or None."""
    exc = unwrap(exc)

    code = getattr(exc, "code", None)
    if code in MAIL_ERRORS:
        return code

    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return EAUTH
    if getattr(exc, "smtp_code", None) == SMTP_AUTH_FAILED:
        return EAUTH
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return ETIMEDOUT
    if isinstance(
        exc,
        (
            smtplib.SMTPConnectError,
            smtplib.SMTPServerDisconnected,
            ConnectionError,
            socket.gaierror,
        ),
    ):
        return ECONNECTION
    if isinstance(exc, ssl.SSLError):
        return ESOCKET
    if isinstance(exc, OSError) and not isinstance(exc, smtplib.SMTPException):
        return ESOCKET
    return None


def error_text(exc):
    exc = unwrap(exc)
    if isinstance(exc, smtplib.SMTPResponseException):
        smtp_error = exc.smtp_error
        if isinstance(smtp_error, bytes):
            smtp_error = smtp_error.decode("utf-8", "replace")
        return f"{exc.smtp_code} {smtp_error}".strip()
    return str(exc)


def classify_mail_error(exc):
    """Return ``(message, hint, code)`` for a verification or delivery failure."""
    code = error_code(exc)

    if isinstance(exc, MailVerificationError) and code == EAUTH:
        return VERIFY_AUTH_MESSAGE, VERIFY_AUTH_HINT, code

    if code is not None:
        message, hint = MAIL_ERRORS[code]
        return message, hint, code

    raw_code = getattr(unwrap(exc), "code", None)
    if not isinstance(raw_code, str):
        raw_code = None

    text = error_text(exc)
    if text:
        return text, "", raw_code
    return SEND_FAILED, "", raw_code


def mail_error_payload(exc, debug=False):
    message, hint, code = classify_mail_error(exc)
    payload = {"message": message, "hint": hint}
    if code is not None:
        payload["code"] = code
    if debug:
        payload["error"] = error_text(exc) or None
    return payload
