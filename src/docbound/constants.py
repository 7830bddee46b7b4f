"""
Project-wide constants for docbound
"""

# ==============================================================================
# Network Configuration
# ==============================================================================

FETCH_TIMEOUT = 60.0  # seconds
MAX_REDIRECTS = 10
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
DOWNLOAD_CHUNK_SIZE = 64 * 1024
USER_AGENT = "docbound/0.1"

# ==============================================================================
# File Processing Configuration
# ==============================================================================

DEFAULT_MAX_DOWNLOAD_MB = 50
DEFAULT_CACHE_DIR = "downloads/documents"
DEFAULT_DOCUMENT_NAME = "document"
EXTRACTED_DIR_SUFFIX = "_extracted"

CONTAINER_ENTRY_CHAR_LIMIT = 50_000
SEPARATOR_WIDTH = 80

# ==============================================================================
# Response Governor Configuration
# ==============================================================================

MAX_WORDS = 3500
CHARS_PER_WORD = 5  # average, used for the character estimate
TOKENS_PER_WORD = 1.3  # heuristic, not tied to any tokenizer

NESTED_LIST_LIMIT = 10
MIN_RECOMMENDED_ITEMS = 10
ITEM_SAMPLE_SIZE = 3
RECORD_SAMPLE_FIELDS = 5
RECOMMENDED_FIELD_COUNT = 7
SAMPLE_TEXT_CHARS = 500
