import numpy as np

from block_timeline.block_loader import Block
from block_timeline.block_registry import BlockRegistry


def _blocks():
    return [Block("a", 0, 4), Block("b", 3, 6), Block("c", 10, 12)]


def test_end_is_max_block_end() -> None:
    assert BlockRegistry(_blocks()).end == 12
    assert BlockRegistry([]).end == 0


def test_active_mask_is_inclusive() -> None:
    reg = BlockRegistry(_blocks())
    np.testing.assert_array_equal(reg.active_mask(4), [True, True, False])
    np.testing.assert_array_equal(reg.active_mask(7), [False, False, False])
    np.testing.assert_array_equal(reg.active_mask(12), [False, False, True])


def test_transitions_follow_declaration_order() -> None:
    reg = BlockRegistry(_blocks())
    a, b, _c = reg.blocks

    first = reg.transitions(3)
    assert first.entering == [a, b]
    assert first.active == [a, b]
    assert first.leaving == []

    a.active = b.active = True
    second = reg.transitions(5)
    assert second.entering == []
    assert second.active == [b]
    assert second.leaving == [a]


def test_replace_guard() -> None:
    reg = BlockRegistry(_blocks(), immutable=True)
    assert not reg.replace([Block("z", 0, 1)])
    assert [b.title for b in reg] == ["a", "b", "c"]

    mutable = BlockRegistry(_blocks())
    assert mutable.replace([Block("z", 0, 1)])
    assert [b.title for b in mutable] == ["z"]
    assert mutable.end == 1


def test_clamp_and_deactivate() -> None:
    reg = BlockRegistry(_blocks())
    assert reg.clamp(20) == 12
    assert reg.clamp(-3) == 0
    assert reg.clamp(5) == 5
    for b in reg:
        b.active = True
    reg.deactivate_all()
    assert reg.active_blocks() == []
