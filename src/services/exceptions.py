"""
Service-level exceptions.

The analytics functions themselves never raise for missing or malformed
data; these exceptions belong to the collaborators around them.
"""

class CycleStoreError(Exception):
    """Raised when the cycle store returns an unusable response."""
    pass

class MetricsCacheError(Exception):
    """Raised when the derived metrics cache cannot be read or written."""
    pass
