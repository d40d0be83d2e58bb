"""Constants and limits for the Google Tasks MCP gateway."""

SERVER_NAME = "gtasks"
SERVER_VERSION = "0.1.0"

RESOURCE_URI_PREFIX = "gtasks:///"
RESOURCE_MIME_TYPE = "text/plain"

TASKS_SCOPE = "https://www.googleapis.com/auth/tasks"
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

CREDENTIALS_FILENAME = ".gtasks-server-credentials.json"
OAUTH_KEYS_FILENAME = "gcp-oauth.keys.json"

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_TASK_LISTS = 100
DEFAULT_AUTH_TIMEOUT_SECONDS = 300.0
TOKEN_REQUEST_TIMEOUT_SECONDS = 10
