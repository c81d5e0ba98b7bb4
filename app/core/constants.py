"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure (DRY). Used by the agency
resolver and the agency repository cache invalidation.
"""

# Cache key prefixes (used with :subdomain)
CACHE_PREFIX_AGENCY = "agency"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Stored in place of an agency id when a subdomain did not resolve.
AGENCY_CACHE_MISS_MARKER = "__missing__"

# Number of recent executions embedded in trigger list responses.
RECENT_EXECUTIONS_PER_TRIGGER = 5

# Default page size / hard cap for list endpoints.
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
