"""
Prometheus metrics for the license activation service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Validation metrics
license_validations_total = Counter(
    "license_validations_total",
    "Total license validations by outcome",
    ["result"],
)

license_activations_total = Counter(
    "license_activations_total",
    "Total admitted validations",
    ["new_activation"],
)

# License lifecycle metrics
license_keys_issued_total = Counter(
    "license_keys_issued_total",
    "Total license keys issued",
    ["status"],
)

license_keys_revoked_total = Counter(
    "license_keys_revoked_total",
    "Total license keys revoked",
)

license_keys_expired_total = Counter(
    "license_keys_expired_total",
    "Total license keys transitioned to expired",
    ["source"],
)

license_keys_purged_total = Counter(
    "license_keys_purged_total",
    "Total expired license keys deleted",
)

# Security metrics
security_events_total = Counter(
    "security_events_total",
    "Total security events raised",
    ["event_type", "severity"],
)

# Notification metrics
notifications_sent_total = Counter(
    "notifications_sent_total",
    "Total notification webhook deliveries",
    ["event_type", "outcome"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
