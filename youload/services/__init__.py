"""Services for youload module."""
from .api_client import HTTPSubmissionClient
from .prober import MediaProber

__all__ = [
    "HTTPSubmissionClient",
    "MediaProber",
]
