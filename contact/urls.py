from django.urls import re_path
from .views import ContactSubmissionView

urlpatterns = [
    # POST bodies cannot follow an APPEND_SLASH redirect, so accept both forms.
    re_path(r'^api/contact/?$', ContactSubmissionView.as_view(), name='contact'),
]
