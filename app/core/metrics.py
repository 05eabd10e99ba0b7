"""Prometheus metrics for The Clever Kit API.

Business metrics: analyzer runs, document generations, Google exports
System metrics: HTTP requests, OpenAI latency, circuit breakers
"""

from prometheus_client import Counter, Histogram, Gauge, Info

# ── Analysis Metrics ─────────────────────────────────────────

BRANDS_ANALYZED = Counter(
    "cleverkit_brands_analyzed_total",
    "Brand analysis requests by outcome",
    ["outcome"],
)

ANALYZER_RUNS_TOTAL = Counter(
    "cleverkit_analyzer_runs_total",
    "Analyzer runs finished",
    ["analyzer_type", "status"],
)

ANALYZER_RUN_DURATION = Histogram(
    "cleverkit_analyzer_run_duration_seconds",
    "Duration of a single analyzer run (analysis + parse)",
    ["analyzer_type"],
    buckets=[1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0],
)

# ── Document Metrics ─────────────────────────────────────────

DOC_GENERATIONS_TOTAL = Counter(
    "cleverkit_doc_generations_total",
    "Document generations by template and outcome",
    ["template_id", "status"],
)

DOC_GENERATION_DURATION = Histogram(
    "cleverkit_doc_generation_duration_seconds",
    "Duration of document generation",
    ["template_id"],
    buckets=[2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0],
)

GOOGLE_EXPORTS_TOTAL = Counter(
    "cleverkit_google_exports_total",
    "Google Docs exports by outcome",
    ["status"],
)

# ── System Metrics ───────────────────────────────────────────

OPENAI_REQUESTS = Counter(
    "cleverkit_openai_requests_total",
    "Total OpenAI chat completion requests",
    ["stage", "status"],
)

OPENAI_LATENCY = Histogram(
    "cleverkit_openai_latency_seconds",
    "OpenAI chat completion latency",
    ["stage"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0],
)

HTTP_REQUESTS = Counter(
    "cleverkit_http_requests_total",
    "Total HTTP requests to the API",
    ["method", "path", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "cleverkit_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

CIRCUIT_BREAKER_STATE = Gauge(
    "cleverkit_circuit_breaker_state",
    "Circuit breaker state (0=closed, 1=open, 2=half_open)",
    ["name"],
)

APP_INFO = Info("cleverkit_app", "The Clever Kit application info")
