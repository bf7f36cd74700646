"""Application-wide constants.

This module centralizes all magic numbers and configuration constants
to ensure a single source of truth and easier maintenance.

Constants are organized by category.
"""

# =============================================================================
# Facebook API
# =============================================================================

# Facebook Graph API version
FACEBOOK_GRAPH_API_VERSION = "v18.0"

# Send API endpoint (relative to the Graph API host)
FACEBOOK_GRAPH_API_HOST = "https://graph.facebook.com"

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0

# Maximum number of response body characters kept in error logs
MAX_LOGGED_RESPONSE_BODY_CHARS = 500

# Metadata attached to outgoing text messages, echoed back by the platform
TEXT_MESSAGE_METADATA = "DEVELOPER_DEFINED_METADATA"

# =============================================================================
# Webhook
# =============================================================================

# Object type sent by Messenger page subscriptions
PAGE_OBJECT_TYPE = "page"

# Signature headers, in order of preference
SIGNATURE_HEADER = "x-hub-signature"
SIGNATURE_256_HEADER = "x-hub-signature-256"

# =============================================================================
# Company Lookup (Glassdoor)
# =============================================================================

GLASSDOOR_API_URL = "http://api.glassdoor.com/api/api.htm"

GLASSDOOR_API_VERSION = 1

# Timeout for company lookup calls (seconds)
COMPANY_LOOKUP_TIMEOUT_SECONDS = 10.0

# =============================================================================
# Static Assets
# =============================================================================

# URL path the bundled assets are served under
ASSETS_URL_PATH = "/assets"

# Default directory holding the bundled assets
DEFAULT_STATIC_DIR = "public/assets"

IMAGE_ASSET = "rift.png"
GIF_ASSET = "gunter.gif"
AUDIO_ASSET = "sample.mp3"
VIDEO_ASSET = "allofus480.mov"
FILE_ASSET = "test.txt"
TOUCH_IMAGE_ASSET = "touch.png"
RIFT_SQUARE_ASSET = "riftsq.png"
GEAR_VR_SQUARE_ASSET = "gearvrsq.png"

# =============================================================================
# Receipts
# =============================================================================

# Receipt order numbers are "order" + a random number below this bound
RECEIPT_ORDER_NUMBER_BOUND = 1000
