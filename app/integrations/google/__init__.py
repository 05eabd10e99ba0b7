from app.integrations.google.docs import GoogleDocCreateResult, create_google_doc, markdown_to_doc_requests
from app.integrations.google.errors import GoogleAPIError, GoogleNotConfigured, GoogleTokenExpired

__all__ = [
    "GoogleAPIError",
    "GoogleDocCreateResult",
    "GoogleNotConfigured",
    "GoogleTokenExpired",
    "create_google_doc",
    "markdown_to_doc_requests",
]
