from .base import CourtApiGateway
from .http import HttpCourtApiClient
from .mock import MockCourtApiClient

__all__ = [
    "CourtApiGateway",
    "HttpCourtApiClient",
    "MockCourtApiClient",
]
