# ownership_api/application/services/hierarchy_cache.py
#
# Explicit, explicitly invalidated holder for the hierarchy index snapshot.
#
# Design decisions:
#   - One instance per application, created in the FastAPI lifespan and kept
#     on app.state. It is passed to services through dependencies, never read
#     from a module global.
#   - The index is rebuilt lazily on first use after an invalidation. Rebuild
#     is guarded by a lock because sync routes run in a thread pool.
#   - invalidate() is synchronous: the ownership service calls it before it
#     returns or raises from a recompute that wrote a new parent_id, so no
#     later request can resolve a scope against the stale tree.
#   - enabled=False turns the holder into a pass-through that rebuilds on every
#     call (stateless-per-request deployment).
from __future__ import annotations

import logging
import threading

from ownership_api.domain.company.repository import CompanyRepository
from ownership_api.domain.hierarchy.index import CompanyHierarchyIndex

logger = logging.getLogger(__name__)


class HierarchyIndexCache:
    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._index: CompanyHierarchyIndex | None = None
        self._lock = threading.Lock()

    def get(self, repo: CompanyRepository, company_id: str | None = None) -> CompanyHierarchyIndex:
        """Current snapshot. A company_id unknown to the cached snapshot (created
        after the last build) forces one rebuild before the caller sees NotFoundError."""
        if not self._enabled:
            return CompanyHierarchyIndex.build(repo.list_all_companies())
        with self._lock:
            if self._index is not None and company_id is not None and company_id not in self._index:
                self._index = None
            if self._index is None:
                self._index = CompanyHierarchyIndex.build(repo.list_all_companies())
                logger.info("Hierarchy index rebuilt with %d companies", len(self._index))
            return self._index

    def invalidate(self) -> None:
        with self._lock:
            self._index = None
        logger.debug("Hierarchy index invalidated")

    @property
    def is_warm(self) -> bool:
        return self._index is not None
