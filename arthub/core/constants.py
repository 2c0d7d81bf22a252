"""arthub constants and fixed names.

All storage keys, endpoints and table names live here. No exceptions.
"""

# Local store keys
OFFLINE_SALES_KEY = "offline_sales"
OFFLINE_GIFT_SALES_KEY = "offline_gift_sales"
OFFLINE_STATIONERY_SALES_KEY = "offline_stationery_sales"
SYNC_QUEUE_KEY = "offline_pending_sync_queue_storage_key"
SYNC_QUEUE_STATE_KEY = "offline_pending_sync_queue_state"

# Keys matching these prefixes belong to the offline subsystem
OFFLINE_KEY_PREFIXES = ("offline_", "pending_")

# Envelope written around every stored value
STORAGE_ENVELOPE_VERSION = "1.0"

# Record identity
OFFLINE_ID_PREFIX = "offline_"
RECORDER_OWNED_FIELDS = ("id", "date", "client_ref")
IDEMPOTENCY_COLUMN = "client_ref"

# Endpoint tags carried by queue entries
ENDPOINT_SALES = "/api/sales"
ENDPOINT_GIFT_SALES = "/api/gift-sales"
ENDPOINT_STATIONERY_SALES = "/api/stationery-sales"

# Remote tables
TABLE_STATIONERY_SALES = "stationery_sales"
TABLE_GIFT_DAILY_SALES = "gift_daily_sales"
TABLE_STATIONERY_DAILY_SALES = "stationery_daily_sales"

# Sync clear policies
CLEAR_UNCONDITIONAL = "unconditional"
CLEAR_SYNCED_ONLY = "synced_only"
CLEAR_POLICIES = (CLEAR_UNCONDITIONAL, CLEAR_SYNCED_ONLY)

# Remote service
SUPABASE_REST_PATH = "/rest/v1"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30
DEFAULT_PROBE_PORT = 443
PROBE_TIMEOUT_SECONDS = 5.0

# Response cache
CACHE_VERSION = "point-art-hub-v1.0.0"
CACHE_KEY_PREFIX = "cache:"
CACHE_NETWORK_FIRST_MARKERS = ("/api/", "/rest/v1/")
CACHE_PRECACHE_URLS = (
    "/",
    "/index.html",
    "/favicon.ico",
    "/point-art-logo-optimized.svg",
)

# Default on-disk location of the file storage port
DEFAULT_STORAGE_DIRNAME = ".arthub"
DEFAULT_STORAGE_FILENAME = "offline_storage.json"
