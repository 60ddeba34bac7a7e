"""Public API for limitless_lifelogs package."""

__version__ = "0.8.0"

from .client import ApiClient
from .config import Settings
from .criteria import RequestCriteria
from .errors import (ApiError, ConfigError, InvalidParams, LifelogError, NetworkError, NotFound,
                     RequestTimeout)
from .models import LifelogRecord, Page, SectionNode, TextNode
from .operations import LifelogOperations
from .pagination import collect, iter_pages
from .results import Outcome, Result
from .search import SearchResult, search_lifelogs
from .cli import main

__all__ = [
    "ApiClient", "ApiError", "ConfigError", "InvalidParams", "LifelogError", "LifelogOperations",
    "LifelogRecord", "NetworkError", "NotFound", "Outcome", "Page", "RequestCriteria",
    "RequestTimeout", "Result", "SearchResult", "SectionNode", "Settings", "TextNode",
    "collect", "iter_pages", "main", "search_lifelogs",
]
