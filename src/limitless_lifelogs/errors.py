"""Typed failures raised by the lifelog client and its callers."""

from __future__ import annotations

from typing import Any, Optional


class LifelogError(Exception):
    """Base class for every failure this package raises on purpose."""


class ConfigError(LifelogError):
    """Missing or unusable configuration. Fatal to the whole process."""


class InvalidParams(LifelogError):
    def __init__(self, message: str, field: Optional[str]=None):
        super().__init__(message)
        self.field = field


class NotFound(LifelogError):
    def __init__(self, lifelog_id: str, body: Any=None):
        super().__init__(f"Lifelog with ID {lifelog_id} not found")
        self.lifelog_id = lifelog_id
        self.body = body


class RequestTimeout(LifelogError):
    def __init__(self, timeout: float):
        super().__init__(f"Limitless API request timed out after {timeout:g}s")
        self.timeout = timeout


class ApiError(LifelogError):
    def __init__(self, message: str, status: Optional[int]=None, body: Any=None):
        super().__init__(message)
        self.status = status
        self.body = body


class NetworkError(LifelogError):
    pass
