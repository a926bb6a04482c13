"""Engine default values for every configuration section."""

# main
DEFAULT_CONFIG_HANDLER_PATH = "/proxy/config"
DEFAULT_PING_HANDLER_PATH = "/proxy/ping"
DEFAULT_RELOAD_HANDLER_PATH = "/proxy/config/reload"
DEFAULT_HEALTH_HANDLER_PATH = "/proxy/health"
DEFAULT_PPROF_SERVER_NAME = "both"

# frontend / metrics
DEFAULT_PROXY_LISTEN_PORT = 8480
DEFAULT_PROXY_LISTEN_ADDRESS = ""
DEFAULT_TLS_PROXY_LISTEN_PORT = 8483
DEFAULT_TLS_PROXY_LISTEN_ADDRESS = ""
DEFAULT_METRICS_LISTEN_PORT = 8481
DEFAULT_METRICS_LISTEN_ADDRESS = ""

# logging
DEFAULT_LOG_FILE = ""
DEFAULT_LOG_LEVEL = "INFO"

# reloading
DEFAULT_RELOAD_LISTEN_PORT = 8484
DEFAULT_RELOAD_LISTEN_ADDRESS = "127.0.0.1"
DEFAULT_DRAIN_TIMEOUT_SECS = 30
DEFAULT_RATE_LIMIT_SECS = 3

# origins
DEFAULT_ORIGIN_CACHE_NAME = "default"
DEFAULT_ORIGIN_NEGATIVE_CACHE_NAME = "default"
DEFAULT_TRACING_CONFIG_NAME = "default"
DEFAULT_ORIGIN_TIMEOUT_SECS = 180
DEFAULT_MAX_IDLE_CONNS = 20
DEFAULT_KEEP_ALIVE_TIMEOUT_SECS = 300
DEFAULT_ORIGIN_TRF = 1024
DEFAULT_ORIGIN_TEM_NAME = "oldest"
DEFAULT_TIMESERIES_TTL_SECS = 21600
DEFAULT_FAST_FORWARD_TTL_SECS = 15
DEFAULT_MAX_TTL_SECS = 86400
DEFAULT_REVALIDATION_FACTOR = 2.0
DEFAULT_MAX_OBJECT_SIZE_BYTES = 524288
DEFAULT_BACKFILL_TOLERANCE_SECS = 0
DEFAULT_FORWARDED_HEADERS = "standard"
DEFAULT_HEALTH_CHECK_PATH = "-"
DEFAULT_HEALTH_CHECK_QUERY = "-"
DEFAULT_HEALTH_CHECK_VERB = "GET"
DEFAULT_COMPRESSABLE_TYPES = [
    "text/javascript", "text/css", "text/plain", "text/xml", "text/json",
    "application/json", "application/javascript", "application/xml",
]

# paths
DEFAULT_PATH_METHODS = ["GET", "HEAD"]
DEFAULT_PATH_MATCH_TYPE_NAME = "exact"
DEFAULT_COLLAPSED_FORWARDING_NAME = "basic"

# caches
DEFAULT_CACHE_TYPE = "memory"
DEFAULT_CACHE_INDEX_REAP_INTERVAL_SECS = 3
DEFAULT_CACHE_INDEX_FLUSH_INTERVAL_SECS = 5
DEFAULT_CACHE_MAX_SIZE_BYTES = 536870912
DEFAULT_CACHE_MAX_SIZE_BACKOFF_BYTES = 16777216
DEFAULT_CACHE_MAX_SIZE_OBJECTS = 0
DEFAULT_CACHE_MAX_SIZE_BACKOFF_OBJECTS = 100
DEFAULT_REDIS_CLIENT_TYPE = "standard"
DEFAULT_REDIS_PROTOCOL = "tcp"
DEFAULT_REDIS_ENDPOINT = "redis:6379"
DEFAULT_CACHE_PATH = "/tmp/proxyconf"
DEFAULT_BBOLT_FILE = "proxyconf.db"
DEFAULT_BBOLT_BUCKET = "proxyconf"

# tracing
DEFAULT_TRACER_TYPE = "none"
DEFAULT_TRACING_SERVICE_NAME = "proxyconf"
DEFAULT_TRACING_SAMPLE_RATE = 1.0
DEFAULT_JAEGER_ENDPOINT_TYPE = "collector"

# rules
DEFAULT_RULE_INPUT_TYPE = "string"
DEFAULT_RULE_INPUT_DELIMITER = " "
DEFAULT_RULE_MAX_EXECUTIONS = 16

# redaction
REDACTED_VALUE = "*****"
