"""Per-form reference data (owner and property listings).

Every form instance fetches its own snapshot when it mounts. Snapshots are
never shared between forms and never invalidated: a transfer recorded in
one form does not refresh the selectors of another form that is already
mounted. The next mount reads fresh server state. That staleness window is
accepted; there is no invalidating cache.

Requests for several kinds run concurrently and are awaited together. A
failure for one kind leaves that list empty and is logged; the other kinds
are unaffected (a torn snapshot is a valid snapshot).
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional

from registry_console.api.client import RegistryApiClient
from registry_console.core.exceptions import RemoteError, ScopeClosedError
from registry_console.core.lifetime import TaskScope
from registry_console.core.schemas.registry import Owner, Property

logger = logging.getLogger(__name__)


class ReferenceKind(str, Enum):
    OWNERS = "owners"
    LANDS = "lands"


@dataclass(frozen=True)
class ReferenceSnapshot:
    owners: List[Owner] = field(default_factory=list)
    lands: List[Property] = field(default_factory=list)
    failed: FrozenSet[ReferenceKind] = frozenset()
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def complete(self) -> bool:
        return not self.failed

    def owner(self, owner_id: str) -> Optional[Owner]:
        return next((o for o in self.owners if o.id == owner_id), None)

    def land(self, land_id: str) -> Optional[Property]:
        return next((land for land in self.lands if land.id == land_id), None)


EMPTY_SNAPSHOT = ReferenceSnapshot()


class ReferenceDataCache:
    """Fetches one reference snapshot for one form instance."""

    def __init__(self, client: RegistryApiClient, scope: TaskScope):
        self._client = client
        self._scope = scope
        self._fetchers: Dict[ReferenceKind, Callable[[], Awaitable[List[Any]]]] = {
            ReferenceKind.OWNERS: client.get_owners,
            ReferenceKind.LANDS: client.get_lands,
        }

    async def fetch_snapshot(self, kinds: Iterable[ReferenceKind]) -> ReferenceSnapshot:
        """Read the requested listings concurrently and wait for all of them.

        Raises:
            ScopeClosedError: If the owning component was disposed before the
                reads settled. The partial results are discarded.
        """
        wanted = [kind for kind in ReferenceKind if kind in set(kinds)]
        if not wanted:
            return ReferenceSnapshot()

        tasks = [self._scope.spawn(self._fetchers[kind]()) for kind in wanted]
        results = await self._scope.wait(asyncio.gather(*tasks, return_exceptions=True))

        if self._scope.closed:
            raise ScopeClosedError(f"{self._scope.name} was disposed during reference fetch")

        lists: Dict[ReferenceKind, List[Any]] = {}
        failed = set()
        for kind, result in zip(wanted, results):
            if isinstance(result, RemoteError):
                logger.warning(f"Failed to fetch {kind.value}: {result.message}")
                failed.add(kind)
                lists[kind] = []
            elif isinstance(result, BaseException):
                raise result
            else:
                lists[kind] = list(result)

        return ReferenceSnapshot(
            owners=lists.get(ReferenceKind.OWNERS, []),
            lands=lists.get(ReferenceKind.LANDS, []),
            failed=frozenset(failed),
        )
