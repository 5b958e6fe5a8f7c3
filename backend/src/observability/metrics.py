"""Prometheus metrics for the applicant portal."""

from prometheus_client import Counter, Gauge, Histogram

http_requests_total = Counter(
    "portal_http_requests_total",
    "Total HTTP requests handled",
    ["method", "status_code"]
)

http_request_duration_seconds = Histogram(
    "portal_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Application workflow
application_uploads_total = Counter(
    "portal_application_uploads_total",
    "Applicant upload submissions",
    ["kind"]  # kind: new|reupload
)

document_reviews_total = Counter(
    "portal_document_reviews_total",
    "Document review decisions",
    ["document_kind", "decision"]
)

application_status_changes_total = Counter(
    "portal_application_status_changes_total",
    "Overall application status changes",
    ["status"]
)

rejected_operations_total = Counter(
    "portal_rejected_operations_total",
    "Operations rejected with a portal error",
    ["error"]
)

# Editing workflow
editing_payments_verified_total = Counter(
    "portal_editing_payments_verified_total",
    "Editing payments verified by an admin"
)

download_tokens_active = Gauge(
    "portal_download_tokens_active",
    "Download tokens currently held in memory"
)
