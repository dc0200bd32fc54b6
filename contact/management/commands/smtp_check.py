from django.conf import settings
from django.core.management.base import BaseCommand

from contact.errors import classify_mail_error, error_text
from contact.mail import (
    build_contact_email,
    close_connection,
    get_contact_connection,
    smtp_settings_summary,
    verify_connection,
)


def candidate_configs():
    host = settings.EMAIL_HOST
    return [
        ("Port 587 (TLS)", host, 587),
        ("Port 465 (SSL)", host, 465),
        ("Global server - Port 587", "smtp.zoho.com", 587),
        ("Pro server - Port 587", "smtppro.zoho.com", 587),
    ]


class Command(BaseCommand):
    help = "Check the SMTP settings used by the contact form"

    def add_arguments(self, parser):
        parser.add_argument(
            "--send",
            action="store_true",
            help="Send a test message through the first configuration that verifies",
        )

    def handle(self, *args, **options):
        summary = smtp_settings_summary()
        self.stdout.write("Configuration:")
        for key in ("host", "port", "user", "from", "password_set"):
            self.stdout.write(f"  {key}: {summary[key]}")

        working = None
        for name, host, port in candidate_configs():
            self.stdout.write(f"\nTesting: {name} ({host}:{port})")
            connection = get_contact_connection(host=host, port=port)
            try:
                verify_connection(connection)
            except Exception as e:
                message, hint, code = classify_mail_error(e)
                self.stdout.write(self.style.ERROR(f"  Failed: {message} [{code}]"))
                self.stdout.write(f"  Error: {error_text(e)}")
                if hint:
                    self.stdout.write(f"  Hint: {hint}")
                continue
            finally:
                close_connection(connection)

            self.stdout.write(self.style.SUCCESS("  Connection verified"))
            if working is None:
                working = (name, host, port)

        if working is None:
            self.stdout.write(self.style.ERROR("\nNo SMTP configuration could be verified"))
            return

        self.stdout.write(self.style.SUCCESS(f"\nWorking configuration: {working[0]}"))
        if options["send"]:
            self.send_test_message(*working)

    def send_test_message(self, name, host, port):
        connection = get_contact_connection(host=host, port=port)
        submission = {
            "name": "SMTP Test",
            "email": settings.CONTACT_FROM_EMAIL,
            "message": f"SMTP test message sent with configuration: {name}",
        }
        try:
            email = build_contact_email(submission, connection)
            email.subject = f"SMTP Test - {name}"
            email.send(fail_silently=False)
        except Exception as e:
            message, hint, code = classify_mail_error(e)
            self.stdout.write(self.style.ERROR(f"Test message failed: {message} [{code}]"))
            if hint:
                self.stdout.write(f"Hint: {hint}")
            return
        finally:
            close_connection(connection)

        self.stdout.write(
            self.style.SUCCESS(f"Test message sent: {email.extra_headers['Message-ID']}")
        )
