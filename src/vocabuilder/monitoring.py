"""Monitoring configuration for the vocabulary builder."""
from prometheus_client import Counter, start_http_server

# User metrics
registrations = Counter(
    "vocabuilder_registrations_total",
    "Total number of registered users",
)

logins = Counter(
    "vocabuilder_logins_total",
    "Total number of login attempts",
    ["result"],
)

# Word management metrics
words_added = Counter(
    "vocabuilder_words_added_total",
    "Total number of words added to word lists",
)

words_updated = Counter(
    "vocabuilder_words_updated_total",
    "Total number of words edited in word lists",
)

words_deleted = Counter(
    "vocabuilder_words_deleted_total",
    "Total number of words deleted from word lists",
)

words_imported = Counter(
    "vocabuilder_words_imported_total",
    "Total number of words imported",
    ["mode"],
)

# Quiz metrics
quiz_words_completed = Counter(
    "vocabuilder_quiz_words_completed_total",
    "Total number of quiz cards the user advanced past",
)

# Error metrics
error_count = Counter(
    "vocabuilder_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

# Store metrics
store_operations = Counter(
    "vocabuilder_store_operations_total",
    "Total number of key-value store operations",
    ["operation_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
