"""
Client side of the contact form.

``ContactForm`` keeps the field values a visitor has typed, posts them to the
contact endpoint and exposes the resulting status for display. A second
submit while a request is outstanding is ignored.
"""

import logging
import threading

import requests

from .serializers import REQUIRED_FIELDS

logger = logging.getLogger("django")

IDLE = "idle"
SUBMITTING = "submitting"
DONE = "done"

SUCCESS = "success"
FAILURE = "failure"

SUCCESS_MESSAGE = ("Message sent successfully!", "We'll get back to you as soon as possible.")
FAILURE_MESSAGE = ("Failed to send message", "Please try again or contact us directly.")

DEFAULT_TIMEOUT = 60


class ContactFormStatus:
    def __init__(self, state=IDLE, outcome=None, message=None):
        self.state = state
        self.outcome = outcome
        self.message = message

    @property
    def succeeded(self):
        return self.state == DONE and self.outcome == SUCCESS

    @property
    def failed(self):
        return self.state == DONE and self.outcome == FAILURE

    def __repr__(self):
        return f"ContactFormStatus({self.state!r}, {self.outcome!r}, {self.message!r})"


class ContactForm:
    fields = ("name", "email", "message", "subject")

    def __init__(self, endpoint, session=None, timeout=DEFAULT_TIMEOUT):
        self.endpoint = endpoint
        self.session = session or requests
        self.timeout = timeout
        self.status = ContactFormStatus()
        self.response = None
        self._values = dict.fromkeys(self.fields, "")
        self._in_flight = threading.Lock()

    def set(self, field, value):
        if field not in self._values:
            raise KeyError(field)
        self._values[field] = "" if value is None else str(value)

    def update(self, **values):
        for field, value in values.items():
            self.set(field, value)

    @property
    def values(self):
        return dict(self._values)

    @property
    def submitting(self):
        """True while a request is outstanding; the submit control is disabled."""
        return self._in_flight.locked()

    @property
    def can_submit(self):
        return not self.submitting and all(
            self._values[field].strip() for field in REQUIRED_FIELDS
        )

    def payload(self):
        data = {field: self._values[field] for field in REQUIRED_FIELDS}
        if self._values["subject"]:
            data["subject"] = self._values["subject"]
        return data

    def reset(self):
        self._values = dict.fromkeys(self.fields, "")

    def submit(self):
        """
        Post the form once.

        Returns False without touching the network when a required field is
        empty or a previous submit is still in flight. Otherwise returns True
        once the request has completed, whatever its outcome; inspect
        ``status`` for the result.
        """
        if not all(self._values[field].strip() for field in REQUIRED_FIELDS):
            return False

        if not self._in_flight.acquire(blocking=False):
            logger.info("Contact form submit ignored: request already in flight")
            return False

        try:
            self.status = ContactFormStatus(SUBMITTING)
            try:
                self.response = self.session.post(
                    self.endpoint, json=self.payload(), timeout=self.timeout
                )
            except requests.RequestException as e:
                logger.error(f"Contact form request failed: {e}")
                self.response = None
                self.status = ContactFormStatus(DONE, FAILURE, FAILURE_MESSAGE)
                return True

            if 200 <= self.response.status_code < 300:
                self.reset()
                self.status = ContactFormStatus(DONE, SUCCESS, SUCCESS_MESSAGE)
            else:
                logger.error(
                    f"Contact form rejected: {self.response.status_code}, {self.response.text}"
                )
                self.status = ContactFormStatus(DONE, FAILURE, FAILURE_MESSAGE)
            return True
        finally:
            self._in_flight.release()
