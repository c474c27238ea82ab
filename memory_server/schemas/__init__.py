"""API schema models."""

from .models import HealthResponse, HealthStatus, ReadyResponse


__all__ = ["HealthResponse", "HealthStatus", "ReadyResponse"]
