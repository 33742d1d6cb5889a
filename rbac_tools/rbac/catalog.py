"""Role catalog snapshots and their lifecycle

A ``CatalogSnapshot`` is an immutable view of one role system's catalog with
its lookup indexes. A ``CatalogStore`` owns the current snapshot for one
role system: it loads it once, serves it while it is fresh and swaps in a
freshly built snapshot when it expires. Requests that already hold a
snapshot keep using it while a refresh runs.
"""

import asyncio
import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from rbac_tools.core.exceptions import CatalogUnavailableError, RoleDefinitionError, RoleNotFoundError
from rbac_tools.core.logging_config import get_logger
from rbac_tools.core.monitoring import MetricsCollector
from rbac_tools.rbac.adapters import ADAPTERS
from rbac_tools.rbac.matcher import WILDCARD, namespace_of, split_segments
from rbac_tools.rbac.models import Operation, Role, RoleSystem
from rbac_tools.rbac.operations import build_operation_index
from rbac_tools.rbac.permissions import effective_grants
from rbac_tools.rbac.search import list_namespaces


logger = get_logger(__name__)

RoleLoader = Callable[[], Awaitable[List[Role]]]


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable catalog of one role system plus derived indexes"""
    system: RoleSystem
    roles: Tuple[Role, ...]
    roles_by_id: Mapping[str, Role] = field(repr=False)
    roles_by_namespace: Mapping[str, Tuple[Role, ...]] = field(repr=False)
    # Roles with a grant rooted at "*"; they can cover any namespace
    wildcard_roles: Tuple[Role, ...] = field(repr=False)
    operations: Tuple[Operation, ...] = field(repr=False)
    namespaces: Tuple[str, ...] = field(repr=False)
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(cls, system: RoleSystem, roles: Sequence[Role]) -> "CatalogSnapshot":
        """Build a snapshot and all of its indexes from a list of roles"""
        roles_by_id: Dict[str, Role] = {}
        unique_roles: List[Role] = []
        for role in roles:
            key = role.id.lower()
            if key in roles_by_id:
                logger.warning("duplicate_role_id_skipped", system=system.value, role_id=role.id)
                continue
            roles_by_id[key] = role
            unique_roles.append(role)

        by_namespace: Dict[str, List[Role]] = {}
        wildcard_roles: List[Role] = []
        for role in unique_roles:
            namespaces = set()
            rooted_at_wildcard = False
            for pattern in effective_grants(role).positive:
                if not pattern:
                    continue
                if split_segments(pattern)[0] == WILDCARD:
                    rooted_at_wildcard = True
                else:
                    namespaces.add(namespace_of(pattern))
            if rooted_at_wildcard:
                wildcard_roles.append(role)
            for namespace in namespaces:
                by_namespace.setdefault(namespace, []).append(role)

        return cls(
            system=system,
            roles=tuple(unique_roles),
            roles_by_id=roles_by_id,
            roles_by_namespace={key: tuple(value) for key, value in by_namespace.items()},
            wildcard_roles=tuple(wildcard_roles),
            operations=tuple(build_operation_index(unique_roles)),
            namespaces=tuple(list_namespaces(unique_roles)),
        )

    def __len__(self) -> int:
        return len(self.roles)

    def __iter__(self) -> Iterator[Role]:
        return iter(self.roles)

    def get_role(self, role_id: str) -> Role:
        """
        Look up a role by id (case-insensitive).

        Raises:
            RoleNotFoundError: If the catalog has no such role
        """
        role = self.roles_by_id.get((role_id or "").strip().lower())
        if role is None:
            raise RoleNotFoundError(role_id, system=self.system.value)
        return role

    def candidates_for(self, required: Sequence[str]) -> Tuple[Role, ...]:
        """
        Roles that could possibly cover every required permission.

        A role can only cover the first requirement if it has a grant in that
        requirement's namespace or a grant rooted at a wildcard, so every
        other role is pruned. Catalog order is preserved.
        """
        first = next((item for item in required if item and item.strip()), None)
        if first is None:
            return self.roles

        namespace = namespace_of(first.strip())
        if namespace == WILDCARD:
            return self.roles

        selected = {id(role) for role in self.roles_by_namespace.get(namespace, ())}
        selected.update(id(role) for role in self.wildcard_roles)
        return tuple(role for role in self.roles if id(role) in selected)


class JsonRoleFileLoader:
    """
    Load role definitions from a JSON file.

    The file holds a list of raw role definitions, or a Microsoft Graph style
    object with the list under ``value``. Records that fail validation are
    skipped with a warning.
    """

    def __init__(self, path: Path, system: RoleSystem):
        self.path = Path(path)
        self.system = system
        self._adapt = ADAPTERS[system]

    def _read(self) -> Any:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError as e:
            raise CatalogUnavailableError(
                "Role definitions file not found",
                system=self.system.value,
                source=str(self.path)
            ) from e
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CatalogUnavailableError(
                f"Role definitions file could not be read: {e}",
                system=self.system.value,
                source=str(self.path)
            ) from e

    async def __call__(self) -> List[Role]:
        document = await asyncio.to_thread(self._read)

        if isinstance(document, dict) and isinstance(document.get("value"), list):
            document = document["value"]
        if not isinstance(document, list):
            raise CatalogUnavailableError(
                "Role definitions file must contain a list of role definitions",
                system=self.system.value,
                source=str(self.path)
            )

        roles = []
        skipped = 0
        for raw in document:
            try:
                roles.append(self._adapt(raw))
            except RoleDefinitionError as e:
                skipped += 1
                logger.warning(
                    "role_definition_skipped",
                    system=self.system.value,
                    role_id=e.role_id,
                    errors=e.errors
                )

        logger.info(
            "role_definitions_read",
            system=self.system.value,
            path=str(self.path),
            roles=len(roles),
            skipped=skipped
        )
        return roles


class CatalogStore:
    """
    Owns the current catalog snapshot of one role system.

    Lifecycle:
    - ``init()`` loads the first snapshot (no-op once loaded)
    - ``get()`` returns the current snapshot, refreshing it once expired
    - ``refresh()`` reloads now and swaps the snapshot reference
    - ``invalidate()`` expires the snapshot so the next ``get()`` reloads

    When a reload fails and an older snapshot exists, the older snapshot is
    kept and served. Without any snapshot the failure propagates.
    """

    # Delay before retrying a failed reload while a stale snapshot is served
    RETRY_AFTER_FAILURE_SECONDS = 60.0

    def __init__(
        self,
        system: RoleSystem,
        loader: RoleLoader,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic
    ):
        self.system = system
        self._loader = loader
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[CatalogSnapshot] = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def snapshot(self) -> Optional[CatalogSnapshot]:
        """Current snapshot without triggering a load"""
        return self._snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def is_expired(self) -> bool:
        return self._clock() >= self._expires_at

    async def init(self) -> CatalogSnapshot:
        """Load the catalog unless it is already loaded"""
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        return await self.refresh(force=False)

    async def get(self) -> CatalogSnapshot:
        """
        Current snapshot, reloaded first if it has expired.

        Raises:
            CatalogUnavailableError: If no snapshot could ever be loaded
        """
        snapshot = self._snapshot
        if snapshot is not None and not self.is_expired:
            return snapshot
        return await self.refresh(force=False)

    def invalidate(self) -> None:
        """Expire the current snapshot; it remains available as a fallback"""
        self._expires_at = 0.0
        logger.info("catalog_invalidated", system=self.system.value)

    async def refresh(self, force: bool = True) -> CatalogSnapshot:
        """
        Reload the catalog and swap in the new snapshot.

        Concurrent callers share one reload. Unless ``force`` is set, a
        caller that waited for another reload reuses its result.
        """
        async with self._lock:
            if not force and self._snapshot is not None and not self.is_expired:
                return self._snapshot

            started = time.perf_counter()
            try:
                roles = await self._loader()
            except CatalogUnavailableError as e:
                MetricsCollector.record_catalog_load(self.system.value, "failure")
                if self._snapshot is None:
                    logger.error("catalog_load_failed", system=self.system.value, error=e.message)
                    raise
                self._expires_at = self._clock() + min(self.RETRY_AFTER_FAILURE_SECONDS, self._ttl_seconds)
                logger.warning(
                    "catalog_refresh_failed_serving_stale",
                    system=self.system.value,
                    error=e.message,
                    stale_since=self._snapshot.loaded_at.isoformat()
                )
                return self._snapshot

            snapshot = CatalogSnapshot.build(self.system, roles)
            self._snapshot = snapshot
            self._expires_at = self._clock() + self._ttl_seconds

            MetricsCollector.record_catalog_load(self.system.value, "success", role_count=len(snapshot))
            logger.info(
                "catalog_loaded",
                system=self.system.value,
                roles=len(snapshot),
                operations=len(snapshot.operations),
                namespaces=len(snapshot.namespaces),
                duration_ms=round((time.perf_counter() - started) * 1000, 2)
            )
            return snapshot


class CatalogRegistry:
    """One CatalogStore per role system"""

    def __init__(self, stores: Mapping[RoleSystem, CatalogStore]):
        self._stores = dict(stores)

    @classmethod
    def from_settings(cls, settings) -> "CatalogRegistry":
        """Registry backed by the JSON files named in the settings"""
        ttl = settings.catalog_ttl_seconds
        return cls({
            RoleSystem.AZURE: CatalogStore(
                RoleSystem.AZURE,
                JsonRoleFileLoader(settings.azure_roles_path, RoleSystem.AZURE),
                ttl
            ),
            RoleSystem.ENTRA_ID: CatalogStore(
                RoleSystem.ENTRA_ID,
                JsonRoleFileLoader(settings.entra_roles_path, RoleSystem.ENTRA_ID),
                ttl
            ),
        })

    def __iter__(self) -> Iterator[CatalogStore]:
        return iter(self._stores.values())

    def get_store(self, system: RoleSystem) -> CatalogStore:
        try:
            return self._stores[system]
        except KeyError:
            raise CatalogUnavailableError(
                "No catalog is configured for this role system",
                system=system.value
            ) from None

    async def get(self, system: RoleSystem) -> CatalogSnapshot:
        """Current snapshot of one role system"""
        return await self.get_store(system).get()

    async def preload(self) -> Dict[RoleSystem, bool]:
        """
        Load every catalog once.

        Failures are logged and reported, never raised, so the service can
        start and report the catalog as unavailable.
        """
        loaded = {}
        for store in self:
            try:
                await store.init()
                loaded[store.system] = True
            except CatalogUnavailableError as e:
                logger.error("catalog_preload_failed", system=store.system.value, error=e.message)
                loaded[store.system] = False
        return loaded
