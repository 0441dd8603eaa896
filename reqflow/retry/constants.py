"""Constants for the retry/timeout governor."""

# Defaults when neither the request nor the settings specify a value
DEFAULT_MAX_RETRIES = 0
DEFAULT_TIMEOUT_MS = 10000
DEFAULT_BACKOFF_UNIT_MS = 1000

# Client/auth errors retrying cannot fix
DEFAULT_EXCLUDED_STATUS_CODES = frozenset({401, 404})

# Log component names
COMPONENT_RETRY = "retry"
