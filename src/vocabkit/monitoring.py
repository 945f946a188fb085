"""Prometheus metrics for vocabkit."""
from prometheus_client import Counter, Histogram, start_http_server

# Import metrics
records_imported = Counter(
    "vocabkit_records_imported_total",
    "Total number of vocabulary records applied by CSV import",
)

import_failures = Counter(
    "vocabkit_import_failures_total",
    "Total number of failed CSV imports",
    ["error_type"],
)

# Review metrics
reviews_recorded = Counter(
    "vocabkit_reviews_recorded_total",
    "Total number of review outcomes recorded",
    ["outcome"],
)

# Generation metrics
generation_requests = Counter(
    "vocabkit_generation_requests_total",
    "Total number of exercise generation requests",
    ["status"],
)

generation_duration = Histogram(
    "vocabkit_generation_duration_seconds",
    "Duration of exercise generation calls in seconds",
    buckets=[1.0, 5.0, 15.0, 30.0, 60.0, 120.0],
)

exercise_groups_created = Counter(
    "vocabkit_exercise_groups_created_total",
    "Total number of exercise groups persisted",
)

exercise_answers = Counter(
    "vocabkit_exercise_answers_total",
    "Total number of answers recorded against generated exercises",
    ["result"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
