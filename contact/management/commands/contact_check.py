import time

import requests
from django.core.management.base import BaseCommand

from contact.client import ContactForm

SAMPLE_SUBMISSION = {
    "name": "Test User",
    "email": "test@example.com",
    "message": (
        "This is a test message from the API check command. "
        "If you receive this, the contact form is working correctly!"
    ),
}

# (description, payload, expected status)
INVALID_SUBMISSIONS = [
    ("Missing fields", {"name": "", "email": "", "message": ""}, 400),
    (
        "Invalid email",
        {"name": "Test User", "email": "invalid-email", "message": "Test message"},
        400,
    ),
]


class Command(BaseCommand):
    help = "Send a sample submission to a running contact endpoint"

    def add_arguments(self, parser):
        parser.add_argument(
            "--url",
            default="http://localhost:8000/api/contact",
            help="Contact endpoint to test",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="Also check the validation and method-not-allowed responses",
        )

    def handle(self, *args, **options):
        url = options["url"]
        self.stdout.write(f"Testing endpoint: {url}")

        form = ContactForm(url)
        form.update(**SAMPLE_SUBMISSION)

        start = time.monotonic()
        form.submit()
        elapsed = time.monotonic() - start

        response = form.response
        if response is not None:
            self.stdout.write(f"Response status: {response.status_code} ({elapsed:.2f}s)")
            self.stdout.write(f"Response body: {response.text}")

        if form.status.succeeded:
            self.stdout.write(self.style.SUCCESS("Contact form is working"))
        else:
            self.stdout.write(self.style.ERROR(f"Contact form failed: {form.status.message[0]}"))

        if options["all"]:
            self.check_error_cases(url)

    def check_error_cases(self, url):
        cases = [(name, "post", payload, expected) for name, payload, expected in INVALID_SUBMISSIONS]
        cases.append(("GET request", "get", None, 405))

        for name, method, payload, expected in cases:
            try:
                response = requests.request(method, url, json=payload, timeout=30)
            except requests.RequestException as e:
                self.stdout.write(self.style.ERROR(f"{name}: request failed ({e})"))
                continue

            if response.status_code == expected:
                self.stdout.write(self.style.SUCCESS(f"{name}: {response.status_code} as expected"))
            else:
                self.stdout.write(
                    self.style.ERROR(f"{name}: expected {expected}, got {response.status_code}")
                )
