"""
Prometheus metrics for the MediCore service.

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

# Authorization metrics
authorization_checks_total = Counter(
    "authorization_checks_total",
    "Authorization checks by kind and outcome",
    ["check", "outcome"],
)

authorization_grants_cache_total = Counter(
    "authorization_grants_cache_total",
    "Authorization grant lookups served from cache or storage",
    ["source"],
)

# License key metrics
license_keys_generated_total = Counter(
    "license_keys_generated_total",
    "Total license keys generated",
    ["strategy"],
)

license_key_collisions_total = Counter(
    "license_key_collisions_total",
    "Candidate keys rejected because they were already issued",
    ["strategy"],
)

license_key_exhaustions_total = Counter(
    "license_key_exhaustions_total",
    "Key generations that hit the re-roll cap",
    ["strategy"],
)

# License metrics
licenses_provisioned_total = Counter(
    "licenses_provisioned_total",
    "Total licenses provisioned",
    ["plan"],
)

license_transitions_total = Counter(
    "license_transitions_total",
    "License status transitions",
    ["transition"],
)

license_usage_operations_total = Counter(
    "license_usage_operations_total",
    "Usage counter operations by outcome",
    ["operation", "resource_type", "outcome"],
)

license_activations_total = Counter(
    "license_activations_total",
    "License activation attempts by outcome",
    ["outcome"],
)

# Cache metrics
cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["cache_key"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["cache_key"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
