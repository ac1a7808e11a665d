"""Prometheus metrics inventory.

Every metric the service exports is declared here; the modules that own
the behavior import the metric and increment it at the point of action.

Counters only go up, so dashboards read them through rate():
  rate(progress_updates_total{source="lesson"}[5m])
Histograms are used where the distribution matters more than the mean
(request latency, quiz scores).
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Learning metrics
# ---------------------------------------------------------------------------

PROGRESS_UPDATES = Counter(
    "progress_updates_total",
    "Lesson progress writes accepted by the server",
    ["source"],  # "lesson" (progress endpoint), "complete", "quiz"
)

LESSON_COMPLETIONS = Counter(
    "lesson_completions_total",
    "First-time lesson completions",
)

COURSE_COMPLETIONS = Counter(
    "course_completions_total",
    "Enrollments that reached the completed status",
)

QUIZ_SUBMISSIONS = Counter(
    "quiz_submissions_total",
    "Graded quiz submissions",
    ["passed"],  # "true" or "false"
)

QUIZ_SCORES = Histogram(
    "quiz_score_percent",
    "Distribution of quiz scores",
    buckets=[10, 20, 30, 40, 50, 60, 69, 70, 80, 90, 100],
)

CERTIFICATES_ISSUED = Counter(
    "certificates_issued_total",
    "Certificates created (repeat issuance requests are not counted)",
)

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Progress cache lookups by result",
    ["operation"],  # "hit" or "miss"
)
