"""HTTP constants for the transport layer."""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Supported URL schemes for absolute routes
VALID_URL_SCHEMES = ("http", "https")

# Log component names
COMPONENT_TRANSPORT = "transport"

# Reason attached to the cancellation token when the consumer goes away
CONSUMER_CANCEL_REASON = "Request cancelled by consumer"
