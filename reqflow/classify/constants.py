"""Constants for response classification."""

# Transport statuses whose body is inspected for an application code
SUCCESS_STATUSES = frozenset({200, 201, 204})

# Effective status when neither the attempt nor its failure carries one
UNKNOWN_STATUS = -1

# Body fields scanned, in order, for an application code
DEFAULT_CODE_KEYS = ("errcode", "error", "code", "err_code")

# Application codes meaning success
DEFAULT_SUCCESS_CODES = (0, 200)
