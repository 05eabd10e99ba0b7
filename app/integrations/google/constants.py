GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_DOCS_API_URL = "https://docs.googleapis.com/v1/documents"
GOOGLE_DOC_EDIT_URL = "https://docs.google.com/document/d/{document_id}/edit"

GOOGLE_OAUTH_SCOPES = (
    "https://www.googleapis.com/auth/documents",
    "https://www.googleapis.com/auth/drive.file",
    "email",
)

# OAuth state older than this is rejected at the callback.
STATE_MAX_AGE_SECONDS = 600

HORIZONTAL_RULE = "────────────────────"
