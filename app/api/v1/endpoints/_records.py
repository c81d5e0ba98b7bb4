"""Helpers shared by the agency record routes."""

from collections.abc import Mapping
from typing import Any, Protocol, TypeVar

from app.domain.exceptions import ResourceNotFoundException


T = TypeVar("T")


class _ScopedRepo(Protocol[T]):
    async def get_by_id_and_agency(self, entity_id: str, agency_id: str) -> T | None: ...


async def get_owned(
    repo: _ScopedRepo[T], agency_id: str, entity_id: str, resource: str
) -> T:
    """Row with entity_id in the agency, else ResourceNotFoundException (404)."""
    row = await repo.get_by_id_and_agency(entity_id, agency_id)
    if row is None:
        raise ResourceNotFoundException(resource, entity_id)
    return row


def apply_changes(row: Any, values: Mapping[str, Any]) -> None:
    for key, value in values.items():
        setattr(row, key, value)
