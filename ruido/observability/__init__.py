from .logging import configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    record_dropped_rows,
    record_search,
    record_search_failure,
    record_track_event,
)
