import smtplib
import socket
import ssl

from django.test import SimpleTestCase

from contact.errors import (
    EAUTH,
    ECONNECTION,
    ESOCKET,
    ETIMEDOUT,
    SEND_FAILED,
    VERIFY_AUTH_MESSAGE,
    MailVerificationError,
    classify_mail_error,
    error_code,
    mail_error_payload,
)


class ErrorCodeTests(SimpleTestCase):
    def test_transport_exceptions(self):
        cases = [
            (smtplib.SMTPAuthenticationError(535, b"Invalid login"), EAUTH),
            (smtplib.SMTPResponseException(535, b"Bad credentials"), EAUTH),
            (smtplib.SMTPConnectError(421, b"Service not available"), ECONNECTION),
            (smtplib.SMTPServerDisconnected("Connection unexpectedly closed"), ECONNECTION),
            (ConnectionRefusedError(111, "Connection refused"), ECONNECTION),
            (ConnectionResetError(104, "Connection reset by peer"), ECONNECTION),
            (socket.gaierror(-2, "Name or service not known"), ECONNECTION),
            (socket.timeout("timed out"), ETIMEDOUT),
            (TimeoutError("timed out"), ETIMEDOUT),
            (ssl.SSLError(1, "wrong version number"), ESOCKET),
            (OSError(101, "Network is unreachable"), ESOCKET),
        ]
        for exc, expected in cases:
            with self.subTest(exc=exc):
                self.assertEqual(error_code(exc), expected)

    def test_explicit_code_attribute(self):
        exc = Exception("boom")
        exc.code = ESOCKET
        self.assertEqual(error_code(exc), ESOCKET)

    def test_unrecognised_errors(self):
        self.assertIsNone(error_code(smtplib.SMTPDataError(554, b"Rejected")))
        self.assertIsNone(error_code(smtplib.SMTPRecipientsRefused({})))
        self.assertIsNone(error_code(ValueError("bad")))

    def test_verification_wrapper_is_unwrapped(self):
        exc = MailVerificationError(socket.timeout("timed out"))
        self.assertEqual(error_code(exc), ETIMEDOUT)


class ClassifyMailErrorTests(SimpleTestCase):
    def test_verification_auth_failure_has_dedicated_message(self):
        exc = MailVerificationError(smtplib.SMTPAuthenticationError(535, b"Invalid login"))
        message, hint, code = classify_mail_error(exc)
        self.assertEqual(message, VERIFY_AUTH_MESSAGE)
        self.assertIn("app-specific password", hint)
        self.assertEqual(code, EAUTH)

    def test_send_auth_failure_uses_table(self):
        message, hint, code = classify_mail_error(
            smtplib.SMTPAuthenticationError(535, b"Invalid login")
        )
        self.assertEqual(message, "Authentication failed")
        self.assertEqual(hint, "Check if you need an app-specific password for Zoho")
        self.assertEqual(code, EAUTH)

    def test_generic_message_fallback(self):
        self.assertEqual(
            classify_mail_error(ValueError("Generic error message")),
            ("Generic error message", "", None),
        )

    def test_no_message_fallback(self):
        self.assertEqual(classify_mail_error(Exception()), (SEND_FAILED, "", None))


class MailErrorPayloadTests(SimpleTestCase):
    def test_production_payload_hides_error(self):
        payload = mail_error_payload(socket.timeout("timed out"), debug=False)
        self.assertEqual(
            payload,
            {
                "message": "Connection timed out",
                "hint": "Check network connectivity and firewall settings",
                "code": ETIMEDOUT,
            },
        )

    def test_development_payload_includes_error(self):
        payload = mail_error_payload(
            smtplib.SMTPAuthenticationError(535, b"5.7.8 Invalid login"), debug=True
        )
        self.assertEqual(payload["code"], EAUTH)
        self.assertEqual(payload["error"], "535 5.7.8 Invalid login")

    def test_generic_payload_has_no_code(self):
        payload = mail_error_payload(ValueError("Generic error message"))
        self.assertEqual(payload, {"message": "Generic error message", "hint": ""})
