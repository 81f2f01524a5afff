"""Utility modules."""

from summerease.utils.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
)

__all__ = ['CircuitBreaker', 'CircuitOpenError', 'CircuitState']
