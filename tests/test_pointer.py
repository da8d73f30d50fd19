import random

from easyapplyagent.core.pointer import TRAIL_LIMIT, PointerSimulator
from easyapplyagent.core.timing import TimingModel

from fake_dom import FakeElement, FakePage


def _pointer(seed: int = 3) -> PointerSimulator:
    return PointerSimulator(timing=TimingModel(rng=random.Random(seed)))


def test_move_to_approaches_then_lands_on_center():
    page = FakePage()
    element = page.add("#target", FakeElement(box=(100, 200, 80, 30)))
    pointer = _pointer()

    assert pointer.move_to(element, page) is True

    assert len(page.mouse.moves) == 4
    cx, cy = 140, 215
    for x, y in page.mouse.moves[:3]:
        assert abs(x - cx) <= 25
        assert abs(y - cy) <= 25
    assert page.mouse.moves[-1] == (cx, cy)

    kinds = [m.kind for m in pointer.trail]
    assert kinds == ["approach", "approach", "approach", "final"]
    for move in pointer.trail[:3]:
        assert 50 <= move.pause_ms < 150
    assert 200 <= pointer.trail[-1].pause_ms < 500
    assert page.waits == [m.pause_ms for m in pointer.trail]


def test_move_to_without_bounding_box_scrolls_into_view():
    page = FakePage()
    element = page.add("#target", FakeElement(box=None))
    pointer = _pointer()

    assert pointer.move_to(element, page) is False
    assert element.scrolled_into_view == 1
    assert page.mouse.moves == []
    assert pointer.trail[-1].kind == "scroll_fallback"
    assert 300 <= page.waits[-1] < 700


def test_mouse_failure_falls_back_to_scroll():
    page = FakePage()
    page.mouse.fail = True
    element = page.add("#target", FakeElement())
    logs = []
    pointer = PointerSimulator(
        timing=TimingModel(rng=random.Random(1)),
        log_fn=lambda msg, level="info": logs.append((msg, level)),
    )

    assert pointer.move_to(element, page) is False
    assert element.scrolled_into_view == 1
    assert any(level == "warn" for _, level in logs)


def test_trail_keeps_only_recent_moves():
    page = FakePage()
    element = FakeElement()
    pointer = _pointer(4)

    for _ in range(60):
        pointer.move_to(element, page)

    assert len(pointer.trail) == TRAIL_LIMIT
    assert pointer.trail[-1].kind == "final"
