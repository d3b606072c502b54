"""
Handler logger for the insights Lambda.

Tracebacks are folded into a single `traceback` field so one failure is one
CloudWatch event.
"""
import os
import sys
import traceback
from aws_lambda_powertools import Logger

def flatten_traceback(exc_info) -> dict:
    """Render exc_info as {'error_type', 'traceback'} on one line."""
    if exc_info is True:
        exc_info = sys.exc_info()
    if not isinstance(exc_info, tuple) or exc_info[0] is None:
        return {}
    lines = traceback.format_exception(*exc_info)
    return {
        "error_type": exc_info[0].__name__,
        "traceback": " | ".join(line.strip() for line in "".join(lines).splitlines() if line.strip())
    }

class SingleLineLogger(Logger):
    """Powertools Logger whose exception() emits the traceback as one field."""

    def exception(self, message, *args, **kwargs):
        extra = dict(kwargs.pop('extra', None) or {})
        extra.update(flatten_traceback(kwargs.pop('exc_info', True)))
        super().exception(message, *args, exc_info=False, extra=extra, **kwargs)

logger = SingleLineLogger(
    service="cycle_insights",
    level=os.environ.get('LOG_LEVEL', 'INFO'),
    use_rfc3339=True
)
