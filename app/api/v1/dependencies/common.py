"""Shared dependency helpers: pagination and app.state accessors."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

import httpx
from fastapi import Query, Request

from app.core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from app.infrastructure.cache.redis_cache import CacheService
from app.infrastructure.services.template_renderer import TemplateRenderer


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def get_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT)] = DEFAULT_PAGE_LIMIT,
) -> PageParams:
    """page/limit query parameters (1-based page)."""
    return PageParams(page=page, limit=limit)


def get_cache(request: Request) -> CacheService | None:
    """Redis cache from app.state (None when disabled or not started)."""
    return getattr(request.app.state, "cache", None)


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    """Shared outbound HTTP client created in the lifespan."""
    return getattr(request.app.state, "http_client", None)


@lru_cache
def get_template_renderer() -> TemplateRenderer:
    """Process-wide renderer (keeps its compiled-template cache across requests)."""
    return TemplateRenderer()
