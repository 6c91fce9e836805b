"""
Prometheus metrics for the search service.

Tracks HTTP traffic, search queries, record source fetches and how many
candidates the relevance gate keeps or excludes.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "search_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "search_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Search metrics
search_queries_total = Counter(
    "search_queries_total", "Total search queries", ["search_type", "status"]
)

search_query_duration_seconds = Histogram(
    "search_query_duration_seconds",
    "Search query duration in seconds",
    ["search_type"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)

search_results_per_query = Histogram(
    "search_results_per_query",
    "Number of results returned per query",
    ["search_type"],
    buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500),
)

search_records_scored_total = Counter(
    "search_records_scored_total",
    "Candidate records scored, by outcome",
    ["record_kind", "outcome"],
)

# Record source metrics
search_source_fetch_total = Counter(
    "search_source_fetch_total",
    "Total record source fetches",
    ["record_kind", "status"],
)

search_source_fetch_duration_seconds = Histogram(
    "search_source_fetch_duration_seconds",
    "Record source fetch duration in seconds",
    ["record_kind"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_search_query(search_type: str, success: bool, duration: float, result_count: int = 0):
    """Track search query metrics."""
    status = "success" if success else "failure"
    search_queries_total.labels(search_type=search_type, status=status).inc()
    search_query_duration_seconds.labels(search_type=search_type).observe(duration)
    if success:
        search_results_per_query.labels(search_type=search_type).observe(result_count)


def track_scored_record(record_kind: str, matched: bool):
    """Track relevance gate outcomes."""
    outcome = "matched" if matched else "excluded"
    search_records_scored_total.labels(record_kind=record_kind, outcome=outcome).inc()


def track_source_fetch(record_kind: str, success: bool, duration: float):
    """Track record source fetches."""
    status = "success" if success else "failure"
    search_source_fetch_total.labels(record_kind=record_kind, status=status).inc()
    search_source_fetch_duration_seconds.labels(record_kind=record_kind).observe(duration)


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
