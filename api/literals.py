"""API-related constants and literals."""

# API Endpoints
API_V1_PREFIX = "/v1"
METRICS_BASE_PATH = f"{API_V1_PREFIX}/metrics"
HEALTH_ENDPOINT = "/health"

# Metrics endpoints
METRICS_RECENT_PATH = "/recent"
METRICS_AGGREGATED_PATH = "/aggregated"
METRICS_CLEANUP_PATH = "/cleanup"

# Query limits
RECENT_LIMIT_MAX = 1000
