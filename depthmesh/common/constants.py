"""Application constants."""

USER_AGENT = "depthmesh/0.3 (+bathymetry research; contact: configured-email)"
SOURCE_NAME_PATTERN = r"mesh500_\d{2,3}_\d{2,3}"
CONVERSION_KINDS = (
    "base10",
    "base60",
    "search60",
    "geojson",
)
OUTPUT_EXTENSIONS = {
    "base10": "txt",
    "base60": "txt",
    "search60": "txt",
    "geojson": "geojson",
}
PROGRESS_MILESTONES = {
    "loading": 10,
    "parsing": 40,
    "processing": 60,
    "transforming": 80,
    "done": 100,
}
WGS84_EPSG = 4326
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "session_id",
    "request_id",
    "stage",
    "source",
    "kind",
    "event",
    "status",
    "percent",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
