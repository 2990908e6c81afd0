# engine.py

from typing import List, Optional, Tuple

FREE_LABEL = "FREE"


# -----------------------------
# Errors
# -----------------------------
class AllocatorError(Exception):
    pass


class InvalidCapacityError(AllocatorError):
    def __init__(self, capacity):
        self.capacity = capacity
        super().__init__(f"Invalid memory size. capacity: {capacity}")


class InvalidRequestError(AllocatorError):
    pass


class DuplicateProcessError(AllocatorError):
    def __init__(self, pid: str):
        self.pid = pid
        super().__init__(f"Process {pid} is already allocated. Try a different ID.")


class InsufficientSpaceError(AllocatorError):
    def __init__(self, pid: str, requested: int, available: int):
        self.pid = pid
        self.requested = requested
        self.available = available
        super().__init__(
            f"No sufficient space to allocate process {pid} ({requested} bytes). "
            f"Total free: {available}"
        )


class UnknownStrategyError(AllocatorError):
    def __init__(self, strategy):
        self.strategy = strategy
        super().__init__(
            f"Invalid algorithm {strategy!r}. "
            "Use 'F' for First Fit, 'B' for Best Fit, or 'W' for Worst Fit."
        )


class ProcessNotFoundError(AllocatorError):
    def __init__(self, pid: str):
        self.pid = pid
        super().__init__(f"Process {pid} not found in memory.")


class InvariantViolation(AllocatorError):
    pass


# -----------------------------
# Model
# -----------------------------
class Block:
    def __init__(self, start, size, owner=None):
        self.start = start
        self.size = size
        self.owner = owner  # None means free

    @property
    def end(self):
        return self.start + self.size

    @property
    def allocated(self):
        return self.owner is not None

    @property
    def label(self):
        return self.owner if self.allocated else FREE_LABEL

    def __repr__(self):
        state = "A" if self.allocated else "F"
        return f"[{state}|{self.label}|{self.start}|{self.size}]"


class FitStrategy:
    FIRST = "F"
    BEST = "B"
    WORST = "W"

    NAMES = {
        FIRST: "First-Fit",
        BEST: "Best-Fit",
        WORST: "Worst-Fit",
    }

    @classmethod
    def parse(cls, token):
        """Map a strategy token or its long name onto F/B/W."""
        if token in cls.NAMES:
            return token
        for code, name in cls.NAMES.items():
            if token == name:
                return code
        raise UnknownStrategyError(token)


class MemoryEngine:
    def __init__(self, capacity=1000):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidCapacityError(capacity)
        self.capacity = capacity
        self.reset()

    def reset(self):
        self.blocks: List[Block] = [Block(0, self.capacity)]
        self.free_space = self.capacity
        self.event_log: List[str] = []

    # -----------------------------
    # Lookup
    # -----------------------------
    def exists(self, pid) -> bool:
        return self._index_of(pid) is not None

    def find_block(self, pid) -> Optional[Block]:
        index = self._index_of(pid)
        return None if index is None else self.blocks[index]

    def _index_of(self, pid):
        for i, block in enumerate(self.blocks):
            if block.allocated and block.owner == pid:
                return i
        return None

    def processes(self) -> List[str]:
        return [b.owner for b in self.blocks if b.allocated]

    # -----------------------------
    # Allocate Dispatcher
    # -----------------------------
    def allocate(self, pid, size, strategy=FitStrategy.FIRST) -> Tuple[int, int]:
        """
        Place process ``pid`` in a free block chosen by ``strategy``.

        Returns the ``(start, end)`` extent of the new block. Raises an
        AllocatorError subclass and leaves the list untouched on failure.
        """
        if not isinstance(pid, str) or not pid or pid == FREE_LABEL:
            raise InvalidRequestError(f"Invalid process id: {pid!r}")
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise InvalidRequestError(f"Invalid size. size: {size}")
        if self.exists(pid):
            self.event_log.append(f"Rejected: {pid} already allocated")
            raise DuplicateProcessError(pid)

        code = FitStrategy.parse(strategy)
        if code == FitStrategy.FIRST:
            index = self._first_fit(size)
        elif code == FitStrategy.BEST:
            index = self._best_fit(size)
        else:
            index = self._worst_fit(size)

        if index is None:
            self.event_log.append(
                f"Failed: {pid} ({size}) by {FitStrategy.NAMES[code]}, {self.free_space} free"
            )
            raise InsufficientSpaceError(pid, size, self.free_space)

        start = self.blocks[index].start
        self.event_log.append(
            f"Allocated: {pid} -> [{start}, {start + size}) by {FitStrategy.NAMES[code]}"
        )
        block = self._split_block(index, pid, size)
        return block.start, block.end

    # -----------------------------
    # Algorithms
    # -----------------------------
    def _candidates(self, req):
        return [
            (i, block.size)
            for i, block in enumerate(self.blocks)
            if not block.allocated and block.size >= req
        ]

    def _first_fit(self, req):
        for i, block in enumerate(self.blocks):
            if not block.allocated and block.size >= req:
                return i
        return None

    def _best_fit(self, req):
        candidates = self._candidates(req)
        if not candidates:
            return None

        best_size = min(size for _, size in candidates)
        # first block achieving the minimum keeps ties in address order
        return next(i for i, size in candidates if size == best_size)

    def _worst_fit(self, req):
        candidates = self._candidates(req)
        if not candidates:
            return None

        worst_size = max(size for _, size in candidates)
        return next(i for i, size in candidates if size == worst_size)

    # -----------------------------
    # Helpers
    # -----------------------------
    def _split_block(self, index, pid, req_size):
        block = self.blocks[index]
        leftover = block.size - req_size

        block.owner = pid
        block.size = req_size
        self.free_space -= req_size

        if leftover > 0:
            self.blocks.insert(index + 1, Block(block.end, leftover))
            self.event_log.append(f"Split: [{block.end}, {block.end + leftover}) left free")
        return block

    def release(self, pid) -> Tuple[int, int]:
        index = self._index_of(pid)
        if index is None:
            self.event_log.append(f"Rejected: release of unknown process {pid}")
            raise ProcessNotFoundError(pid)

        block = self.blocks[index]
        extent = (block.start, block.end)
        block.owner = None
        self.free_space += block.size
        self.event_log.append(f"Released: {pid} [{extent[0]}, {extent[1]})")

        self._merge_at(index)
        return extent

    def _merge_at(self, index):
        # successor first so the index stays valid for the predecessor check
        if index + 1 < len(self.blocks) and self._mergeable(index):
            self._absorb_next(index)
        if index > 0 and self._mergeable(index - 1):
            self._absorb_next(index - 1)

    def _mergeable(self, index):
        return not self.blocks[index].allocated and not self.blocks[index + 1].allocated

    def _absorb_next(self, index):
        current = self.blocks[index]
        nxt = self.blocks.pop(index + 1)
        current.size += nxt.size
        self.event_log.append(f"Merged: free [{current.start}, {current.end})")

    def merge(self) -> int:
        """Coalesce every run of adjacent free blocks; returns blocks removed."""
        removed = 0
        i = 0
        while i < len(self.blocks) - 1:
            if self._mergeable(i):
                self._absorb_next(i)
                removed += 1
            else:
                i += 1
        return removed

    # -----------------------------
    # Compaction
    # -----------------------------
    def compact(self) -> int:
        """
        Slide every occupied block toward address 0 and gather all free
        space into a single trailing block. Returns how many blocks moved.
        """
        compacted = []
        position = 0
        moved = 0

        for block in self.blocks:
            if not block.allocated:
                continue
            if block.start != position:
                moved += 1
            block.start = position
            position = block.end
            compacted.append(block)

        if position < self.capacity:
            compacted.append(Block(position, self.capacity - position))

        self.blocks = compacted
        self.event_log.append(f"Compacted: {moved} moved, free [{position}, {self.capacity})")
        return moved

    # -----------------------------
    # Status
    # -----------------------------
    def report(self) -> List[Tuple[int, int, str]]:
        return [(b.start, b.end, b.label) for b in self.blocks]

    def check_invariants(self):
        if not self.blocks or self.blocks[0].start != 0:
            raise InvariantViolation("block list does not start at address 0")
        if self.blocks[-1].end != self.capacity:
            raise InvariantViolation(
                f"block list ends at {self.blocks[-1].end}, capacity is {self.capacity}"
            )

        owners = set()
        for prev, block in zip([None] + self.blocks[:-1], self.blocks):
            if block.size <= 0:
                raise InvariantViolation(f"empty block {block!r}")
            if prev is not None and prev.end != block.start:
                raise InvariantViolation(f"gap or overlap between {prev!r} and {block!r}")
            if prev is not None and not prev.allocated and not block.allocated:
                raise InvariantViolation(f"adjacent free blocks {prev!r} and {block!r}")
            if block.allocated:
                if block.owner in owners:
                    raise InvariantViolation(f"duplicate owner {block.owner}")
                owners.add(block.owner)

        total_free = sum(b.size for b in self.blocks if not b.allocated)
        if total_free != self.free_space:
            raise InvariantViolation(
                f"free space is {self.free_space}, blocks hold {total_free}"
            )

    # --------------------------------------
    # Fragmentation Metrics
    # --------------------------------------
    def get_fragmentation_metrics(self):
        free_blocks = [b.size for b in self.blocks if not b.allocated]

        # external = 1 - (largest_free_block / total_free)
        largest_free = max(free_blocks) if free_blocks else 0
        if self.free_space == 0:
            external_frag = 0
        else:
            external_frag = 1 - (largest_free / self.free_space)

        utilization = (self.capacity - self.free_space) / self.capacity

        return {
            "external": round(external_frag, 4),
            "utilization": round(utilization, 4),
            "free_blocks": len(free_blocks),
            "largest_free": largest_free,
        }
