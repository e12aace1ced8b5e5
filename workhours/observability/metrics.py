"""
Prometheus metrics for the work hours service.
"""
import os
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator


wakatime_cache_hits_total = Counter(
    "wakatime_cache_hits_total",
    "WakaTime lookups served from the TTL cache",
    ["kind"],
)

wakatime_requests_total = Counter(
    "wakatime_requests_total",
    "WakaTime API calls by outcome",
    ["outcome"],
)

time_parse_failures_total = Counter(
    "time_parse_failures_total",
    "Time strings rejected by the parser",
    ["variant"],
)


def setup_metrics(app):
    """
    Instrument the app and expose /metrics.
    Only enabled when METRICS_ENABLED is true.
    """
    if os.getenv("METRICS_ENABLED", "").lower() not in ("true", "1", "yes"):
        return

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=False,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics"],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.instrument(app).expose(app, include_in_schema=True, tags=["observability"])
