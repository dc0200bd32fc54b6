import logging
import os
import smtplib
from unittest.mock import MagicMock, patch

from django.conf import settings
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient


class LoggingTest(SimpleTestCase):
    def setUp(self):
        self.log_file_path = os.path.join(settings.BASE_DIR, "logs", "django_errors.log")

    def read_log(self):
        for handler in logging.getLogger("django").handlers:
            handler.flush()
        with open(self.log_file_path, "r") as log_file:
            return log_file.read()

    def clean_log(self, log_contents, text):
        with open(self.log_file_path, "w") as log_file:
            log_file.write(log_contents.replace(text, ""))

    def test_error_logging_to_file(self):
        # The log message to test
        test_message = "This is a test error message for logging."

        logger = logging.getLogger("django")
        logger.error(test_message)

        self.assertTrue(os.path.exists(self.log_file_path), "Log file does not exist.")

        log_contents = self.read_log()
        self.assertIn(test_message, log_contents, "Log message not found in log file.")

        self.clean_log(log_contents, test_message)

    @override_settings(CONTACT_FROM_EMAIL="hello@carbie.com.au")
    @patch("contact.mail.get_connection")
    def test_failed_delivery_is_logged(self, mock_get_connection):
        connection = MagicMock()
        connection.send_messages.side_effect = smtplib.SMTPDataError(
            554, b"Logged rejection marker"
        )
        mock_get_connection.return_value = connection

        with self.assertLogs("django", level="ERROR") as logs:
            response = APIClient().post(
                reverse("contact"),
                {"name": "Test User", "email": "test@example.com", "message": "Hello"},
                format="json",
            )

        self.assertEqual(response.status_code, 500)
        self.assertTrue(
            any("Logged rejection marker" in line for line in logs.output), logs.output
        )

    @override_settings(
        CONTACT_FROM_EMAIL="hello@carbie.com.au", EMAIL_HOST_PASSWORD="never-log-me"
    )
    @patch("contact.mail.get_connection")
    def test_password_is_not_logged(self, mock_get_connection):
        connection = MagicMock()
        connection.send_messages.return_value = 1
        mock_get_connection.return_value = connection

        with self.assertLogs("django", level="INFO") as logs:
            APIClient().post(
                reverse("contact"),
                {"name": "Test User", "email": "test@example.com", "message": "Hello"},
                format="json",
            )

        self.assertTrue(any("password set=True" in line for line in logs.output))
        self.assertFalse(any("never-log-me" in line for line in logs.output))
