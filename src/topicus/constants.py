"""
Shared constants for Topicus.
"""

SCHEMA_VERSION = 1
DOCUMENT_TOPIC_SMOOTHING = 0.1
TOPIC_WORD_SMOOTHING = 0.1
STAGNATION_LIMIT = 5
LOG_PREFIX = "[lda]"
