import ssl

from django.conf import settings
from django.core.mail.backends.smtp import EmailBackend
from django.utils.functional import cached_property


class ContactEmailBackend(EmailBackend):
    """SMTP backend for the contact relay.

    Same as Django's backend except for the TLS context: TLS 1.2 is the
    floor, and certificate checks are skipped unless
    ``CONTACT_SMTP_VERIFY_CERTS`` is on.
    """

    @cached_property
    def ssl_context(self):
        context = super().ssl_context
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        if not getattr(settings, "CONTACT_SMTP_VERIFY_CERTS", True):
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context
