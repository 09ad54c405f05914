"""Per-client node ID allocation for scsynth."""

from __future__ import annotations

import bisect
import logging
from collections.abc import Hashable
from typing import NamedTuple

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Node IDs are 32-bit; the low 26 bits address a node within a client's
# partition and the client ID occupies the bits above.
CLIENT_ID_SHIFT = 26
ID_SPACE = 2**CLIENT_ID_SHIFT
ID_MASK = ID_SPACE - 1
MAXIMUM_CLIENT_ID = 31
DEFAULT_BOUNDARY = 1000


class NamedAllocation(NamedTuple):
    fresh: bool
    node_id: int


class NodeIdAllocator:
    """Allocator for node IDs in one client's partition of the ID space.

    IDs below ``boundary`` are *permanent*: allocated sequentially from 1 and
    recycled lowest-first once freed. IDs from ``boundary`` up to
    ``2**26 - 1`` are *temporary*: handed out round-robin and never freed.
    Every returned ID has ``client_id << 26`` OR-ed in.

    ::

        allocator = NodeIdAllocator()
        [allocator.allocate_temporary() for _ in range(3)]  # [1000, 1001, 1002]
        [allocator.allocate_permanent() for _ in range(3)]  # [1, 2, 3]
        allocator.free_permanent(2)
        allocator.allocate_permanent()  # 2

    Permanent IDs can also be bound to names with ``allocate_named()``.

    There is no internal locking: an allocator must be owned by a single
    session, or guarded by the caller.
    """

    def __init__(self, client_id: int = 0, boundary: int = DEFAULT_BOUNDARY) -> None:
        if not 0 <= client_id <= MAXIMUM_CLIENT_ID:
            raise ConfigError(
                f"client_id must be between 0 and {MAXIMUM_CLIENT_ID}, "
                f"got {client_id}"
            )
        if not 2 <= boundary <= ID_MASK:
            raise ConfigError(
                f"boundary must be between 2 and {ID_MASK}, got {boundary}"
            )
        self._client_id = client_id
        self._boundary = boundary
        self._mask = client_id << CLIENT_ID_SHIFT
        self.reset()

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} client={self._client_id} "
            f"boundary={self._boundary}>"
        )

    def reset(self) -> None:
        """Forget every allocation, as after a server restart."""
        self._temp = self._boundary
        self._next_permanent_id = 1
        self._freed_permanent_ids: list[int] = []
        self._named_ids: dict[Hashable, int] = {}
        self._highest_permanent_id = 0

    @property
    def client_id(self) -> int:
        return self._client_id

    @property
    def boundary(self) -> int:
        return self._boundary

    @property
    def mask(self) -> int:
        return self._mask

    @property
    def default_group_id(self) -> int:
        """The ID of this client's default group."""
        return self._client_id * ID_SPACE + 1

    # -- Temporary IDs ---------------------------------------------------------

    def allocate_temporary(self, count: int = 1) -> int:
        """Return the next temporary ID and reserve ``count`` consecutive IDs."""
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")
        node_id = self._temp
        temp = node_id + count
        if temp > ID_MASK:
            span = ID_SPACE - self._boundary
            temp = self._boundary + (temp - self._boundary) % span
        self._temp = temp
        return node_id | self._mask

    # -- Permanent IDs ---------------------------------------------------------

    def allocate_permanent(self) -> int:
        """Return the lowest freed permanent ID, or the next sequential one."""
        if self._freed_permanent_ids:
            return self._freed_permanent_ids.pop(0) | self._mask
        node_id = self._next_permanent_id
        if node_id <= self._highest_permanent_id:
            # The sequential cursor is pinned at boundary - 1.
            logger.warning(
                "Permanent node IDs exhausted for client %d, reusing %d",
                self._client_id,
                node_id,
            )
        self._highest_permanent_id = node_id
        self._next_permanent_id = min(node_id + 1, self._boundary - 1)
        return node_id | self._mask

    def free_permanent(self, node_id: int) -> None:
        """Return a permanent ID for reuse.

        IDs outside the permanent range, IDs never handed out, and IDs
        already free are ignored.
        """
        node_id &= ID_MASK
        if not 0 < node_id <= self._highest_permanent_id:
            return
        index = bisect.bisect_left(self._freed_permanent_ids, node_id)
        if (
            index < len(self._freed_permanent_ids)
            and self._freed_permanent_ids[index] == node_id
        ):
            return
        self._freed_permanent_ids.insert(index, node_id)

    # -- Named IDs -------------------------------------------------------------

    def allocate_named(self, name: Hashable) -> NamedAllocation:
        """Return the permanent ID bound to ``name``, allocating it if needed.

        ``fresh`` is True when the ID was allocated by this call.
        """
        node_id = self._named_ids.get(name)
        if node_id is not None:
            return NamedAllocation(False, node_id)
        node_id = self.allocate_permanent()
        self._named_ids[name] = node_id
        return NamedAllocation(True, node_id)

    def lookup_named(self, name: Hashable) -> int | None:
        return self._named_ids.get(name)

    def free_named(self, name: Hashable) -> None:
        """Unbind ``name`` and free its ID. Unknown names are ignored."""
        node_id = self._named_ids.pop(name, None)
        if node_id is not None:
            self.free_permanent(node_id)
