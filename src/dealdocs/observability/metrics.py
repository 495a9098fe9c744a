"""Prometheus metrics for DealDocs.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# Upload metrics
uploads_total = Counter(
    "dealdocs_uploads_total",
    "Total document upload attempts",
    ["outcome"]  # outcome: success|rejected|error
)

upload_size_bytes = Histogram(
    "dealdocs_upload_size_bytes",
    "Size of successfully uploaded documents in bytes",
    buckets=[1024, 10 * 1024, 100 * 1024, 512 * 1024, 1024 * 1024, 2.5 * 1024 * 1024, 5 * 1024 * 1024]
)

# Download metrics
downloads_total = Counter(
    "dealdocs_downloads_total",
    "Total streamed downloads by final state",
    ["final_state"]  # DONE|ABORTED
)

download_bytes_total = Counter(
    "dealdocs_download_bytes_total",
    "Total bytes written to download responses"
)

# Aggregation metrics
document_listings_total = Counter(
    "dealdocs_document_listings_total",
    "Total 'my documents' aggregation calls",
    ["outcome"]  # success|error
)

document_listing_fanout = Histogram(
    "dealdocs_document_listing_fanout",
    "Number of per-deal file queries issued by one aggregation call",
    buckets=[0, 1, 2, 5, 10, 25, 50, 100]
)
