import re

from rest_framework import serializers

# Intentionally loose: local@domain.tld with no whitespace and a single "@".
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

FIELDS_REQUIRED = "All fields are required"
INVALID_EMAIL = "Invalid email format"
INVALID_SUBJECT = "Invalid subject"

REQUIRED_FIELDS = ("name", "email", "message")

SUBJECT_CHOICES = {
    "general": "General inquiry",
    "support": "Technical support",
    "sales": "Sales",
    "partnership": "Partnerships",
    "feedback": "Feedback",
}


def is_valid_email(value):
    return bool(value) and EMAIL_PATTERN.fullmatch(value) is not None


def subject_label(subject):
    return SUBJECT_CHOICES.get(subject)


class ContactSubmissionSerializer(serializers.Serializer):
    """Validates a contact form submission.

    Nothing is persisted; ``validated_data`` is handed straight to the mail
    relay. Presence is checked before the email shape so a submission with
    both problems reports the missing fields.
    """

    name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    # Untrimmed: the pattern is applied to the address exactly as submitted.
    email = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, trim_whitespace=False
    )
    message = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    subject = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if not all((attrs.get(field) or "").strip() for field in REQUIRED_FIELDS):
            raise serializers.ValidationError(FIELDS_REQUIRED, code="required")

        if not is_valid_email(attrs["email"]):
            raise serializers.ValidationError(INVALID_EMAIL, code="invalid_email")

        subject = attrs.get("subject")
        if subject:
            if subject not in SUBJECT_CHOICES:
                raise serializers.ValidationError(
                    INVALID_SUBJECT, code="invalid_subject"
                )
        else:
            attrs.pop("subject", None)

        return attrs

    @property
    def first_error(self):
        """The single human readable message the endpoint returns."""
        errors = self.errors
        if "non_field_errors" in errors:
            return errors["non_field_errors"][0]
        for field_errors in errors.values():
            return f"{field_errors[0]}"
        return FIELDS_REQUIRED
