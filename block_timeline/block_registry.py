from typing import Any, Dict, Iterator, List, NamedTuple, Sequence, Tuple

import numpy as np

from .block_loader import Block

# -----------------------------------------------------------------------------
# Block Registry: ordered blocks, timeline end, activation transitions
# -----------------------------------------------------------------------------
class Transitions(NamedTuple):
    entering: List[Block]
    active: List[Block]
    leaving: List[Block]

class BlockRegistry:
    """Blocks in declaration order.

    Every list handed out (iteration, transitions) is in declaration order,
    which is also the order in which active callbacks are invoked.
    """
    def __init__(self, blocks: Sequence[Block], immutable: bool = False):
        self._immutable = immutable
        self._blocks: Tuple[Block, ...] = ()
        self._starts = np.empty(0, dtype=float)
        self._ends = np.empty(0, dtype=float)
        self._end: float = 0
        self._set(blocks)

    # Accessors ------------------------------------------------------------------
    @property
    def blocks(self) -> Tuple[Block, ...]:
        return self._blocks

    @property
    def end(self) -> float:
        return self._end

    @property
    def immutable(self) -> bool:
        return self._immutable

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks)

    def summaries(self) -> List[Dict[str, Any]]:
        return [b.summary() for b in self._blocks]

    # API -----------------------------------------------------------------------
    def replace(self, blocks: Sequence[Block]) -> bool:
        """Swap in a new block set. Refused when the initial set is authoritative."""
        if self._immutable:
            return False
        self._set(blocks)
        return True

    def active_mask(self, position: float) -> np.ndarray:
        return (self._starts <= position) & (position <= self._ends)

    def transitions(self, position: float) -> Transitions:
        mask = self.active_mask(position)
        entering: List[Block] = []
        active: List[Block] = []
        leaving: List[Block] = []
        for block, now_active in zip(self._blocks, mask):
            if now_active:
                active.append(block)
                if not block.active:
                    entering.append(block)
            elif block.active:
                leaving.append(block)
        return Transitions(entering, active, leaving)

    def active_blocks(self) -> List[Block]:
        return [b for b in self._blocks if b.active]

    def deactivate_all(self) -> None:
        for b in self._blocks:
            b.active = False

    def clamp(self, position: float) -> float:
        return min(max(position, 0), self._end)

    # internal ------------------------------------------------------------------
    def _set(self, blocks: Sequence[Block]) -> None:
        self._blocks = tuple(blocks)
        self._starts = np.array([b.start for b in self._blocks], dtype=float)
        self._ends = np.array([b.end for b in self._blocks], dtype=float)
        self._end = max((b.end for b in self._blocks), default=0)
