"""
Prometheus metrics configuration
"""
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram,
                               generate_latest)

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'folio_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'folio_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'folio_http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

# ============================================================================
# AI Gateway Metrics
# ============================================================================

ai_requests_total = Counter(
    'folio_ai_requests_total',
    'Total number of AI provider requests',
    ['provider', 'model', 'status']
)

ai_request_duration_seconds = Histogram(
    'folio_ai_request_duration_seconds',
    'AI provider request duration in seconds',
    ['provider', 'model'],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0)
)

ai_tool_calls_total = Counter(
    'folio_ai_tool_calls_total',
    'Total number of tool calls returned by the model',
    ['tool']
)

# ============================================================================
# Edge Function Metrics
# ============================================================================

function_invocations_total = Counter(
    'folio_function_invocations_total',
    'Total number of edge function invocations',
    ['function', 'outcome']  # outcome: 'success', 'client_error', 'error'
)

autopilot_tasks_total = Counter(
    'folio_autopilot_tasks_total',
    'Autopilot tasks by type and final status',
    ['task_type', 'status']
)

newsletter_emails_total = Counter(
    'folio_newsletter_emails_total',
    'Newsletter emails by delivery outcome',
    ['outcome']  # 'sent', 'failed'
)

webhook_deliveries_total = Counter(
    'folio_webhook_deliveries_total',
    'Outgoing event webhooks by event type and outcome',
    ['event_type', 'outcome']  # 'success', 'error'
)

# ============================================================================
# Database Metrics
# ============================================================================

db_queries_total = Counter(
    'folio_db_queries_total',
    'Total number of database queries',
    ['operation', 'table']
)

db_query_duration_seconds = Histogram(
    'folio_db_query_duration_seconds',
    'Database query duration in seconds',
    ['operation', 'table'],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0)
)


def get_metrics_response() -> tuple[bytes, str]:
    """Render current metrics in Prometheus text format"""
    return generate_latest(), CONTENT_TYPE_LATEST


def record_function_outcome(function: str, status_code: int):
    """Count one edge-function invocation by HTTP outcome"""
    if status_code < 400:
        outcome = "success"
    elif status_code < 500:
        outcome = "client_error"
    else:
        outcome = "error"
    function_invocations_total.labels(function=function, outcome=outcome).inc()
