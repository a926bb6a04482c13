"""
Prometheus metrics for configuration loading and staleness polling.

Usage:
    from proxyconf.metrics import record_load, record_staleness_check

    record_load(success=True)
    record_staleness_check("rate_limited")
"""
import logging
import time

from prometheus_client import Counter, Gauge

log = logging.getLogger(__name__)

CONFIG_LOADS = Counter(
    'proxyconf_config_loads_total',
    'Configuration load attempts',
    ['result']
)
STALENESS_CHECKS = Counter(
    'proxyconf_staleness_checks_total',
    'Configuration staleness checks',
    ['result']
)
LAST_LOAD_TIMESTAMP = Gauge(
    'proxyconf_config_last_load_timestamp_seconds',
    'Unix time of the last successful configuration load'
)

STALENESS_RESULTS = ("rate_limited", "fresh", "stale", "unreadable")


def record_load(success: bool) -> None:
    """Count a load attempt and stamp the time of successful ones."""
    CONFIG_LOADS.labels(result="success" if success else "failure").inc()
    if success:
        LAST_LOAD_TIMESTAMP.set(time.time())


def record_staleness_check(result: str) -> None:
    if result not in STALENESS_RESULTS:
        log.debug("metrics.unknown_staleness_result result=%s", result)
        return
    STALENESS_CHECKS.labels(result=result).inc()
