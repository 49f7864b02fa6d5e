"""Read-only view of the playlist network used by the allocator."""

import logging
from collections.abc import Mapping

from src.core.genres import Genre, resolve_genre
from src.core.schemas import Resource
from src.core.stores import ResourceCatalogStore

logger = logging.getLogger(__name__)


def _sort_key(resource: Resource) -> tuple[str, str]:
    return (resource.name, resource.id)


class ResourceCatalog:
    """Lists playlists that can take another campaign right now."""

    def __init__(self, store: ResourceCatalogStore):
        self.store = store

    def list_assignable(self, genre: Genre | str, occupancy: Mapping[str, int] | None = None) -> list[Resource]:
        """Assignable playlists of ``genre``, ordered by name then id.

        Args:
            genre: Genre to match; raw strings go through ``resolve_genre``
            occupancy: Optional per-playlist count of campaigns already holding a
                slot. The larger of this and the cached utilization is used for the
                capacity check.

        Raises:
            StoreError: If the catalog cannot be fetched
        """
        genre = resolve_genre(genre)
        occupancy = occupancy or {}

        assignable = []
        for resource in self.store.list_active():
            if resource.genre != genre:
                continue
            reserved = occupancy.get(resource.id, 0)
            if reserved > resource.utilization:
                resource = resource.model_copy(update={"utilization": reserved})
            if resource.is_assignable:
                assignable.append(resource)

        assignable.sort(key=_sort_key)
        logger.debug(f"{len(assignable)} assignable {genre.value} playlist(s)")
        return assignable
