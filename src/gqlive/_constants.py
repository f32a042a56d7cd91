"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8080/demo-graphql"
GRAPHQL_PATH = "/graphql"
USER_AGENT = "gqlive/0.1"

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"
JSON_CONTENT_TYPE = "application/json"

# Event-stream framing
EVENT_SEPARATOR = "\n\n"
EVENT_PREFIX = "event: "
DATA_PREFIX = "data: "
DEFAULT_EVENT_TYPE = "message"

DEFAULT_SUBSCRIPTION_FIELDS: tuple[str, ...] = ("id", "name")
RECORD_ID_FIELD = "id"

# Status labels
STATUS_READY = "Ready"
STATUS_ERROR = "Error"
STATUS_SUCCESS = "Success"
STATUS_LIVE_PREFIX = "Live: "
DEFAULT_STATUS_RESET_DELAY = 2.0
