import logging

from django.conf import settings
from django_ratelimit.decorators import ratelimit
from django_ratelimit.exceptions import Ratelimited
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .errors import mail_error_payload
from .mail import send_contact_email
from .serializers import ContactSubmissionSerializer

logger = logging.getLogger("django")

METHOD_NOT_ALLOWED = {"message": "Method not allowed"}
TOO_MANY_REQUESTS = {"message": "Too many requests, please try again later"}


def conditional_ratelimit(*args, **kwargs):
    def decorator(func):
        if settings.TESTING:
            return func
        return ratelimit(*args, **kwargs)(func)

    return decorator


@conditional_ratelimit(
    key="ip", rate=settings.CONTACT_RATE_LIMIT, method="POST", block=True
)
def rate_limit_check(request):
    pass


class ContactSubmissionView(APIView):
    """Validate a contact form submission and relay it by email."""

    def post(self, request):

        # Perform rate limit check
        rate_limit_check(request)

        serializer = ContactSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"message": serializer.first_error},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            message_id = send_contact_email(serializer.validated_data)
        except Exception as e:
            logger.error(
                f"Failed to send contact email ({type(e).__name__}): {e}",
                exc_info=True,
            )
            return Response(
                mail_error_payload(e, debug=settings.CONTACT_EXPOSE_ERRORS),
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(
            {"message": "Email sent successfully", "messageId": message_id},
            status=status.HTTP_200_OK,
        )

    def get(self, request, *args, **kwargs):
        return Response(METHOD_NOT_ALLOWED, status=status.HTTP_405_METHOD_NOT_ALLOWED)

    def put(self, request, *args, **kwargs):
        return Response(METHOD_NOT_ALLOWED, status=status.HTTP_405_METHOD_NOT_ALLOWED)

    def patch(self, request, *args, **kwargs):
        return Response(METHOD_NOT_ALLOWED, status=status.HTTP_405_METHOD_NOT_ALLOWED)

    def delete(self, request, *args, **kwargs):
        return Response(METHOD_NOT_ALLOWED, status=status.HTTP_405_METHOD_NOT_ALLOWED)

    def options(self, request, *args, **kwargs):
        return Response(METHOD_NOT_ALLOWED, status=status.HTTP_405_METHOD_NOT_ALLOWED)

    def handle_exception(self, exc):
        if isinstance(exc, Ratelimited):
            logger.warning("Contact form rate limit exceeded")
            return Response(TOO_MANY_REQUESTS, status=status.HTTP_429_TOO_MANY_REQUESTS)

        response = super().handle_exception(exc)
        # Parse and other DRF errors use the same {"message": ...} shape.
        if isinstance(response.data, dict) and "detail" in response.data:
            response.data = {"message": response.data["detail"]}
        return response
