import random

import pytest

from easyapplyagent.core.errors import SessionUnavailableError
from easyapplyagent.core.locator import (
    AttributeProbe,
    LocatorEngine,
    ResolvePolicy,
    ScriptProbe,
    StructuralProbe,
    Target,
    TextProbe,
)
from easyapplyagent.core.targets import EASY_APPLY
from easyapplyagent.core.timing import TimingModel

from fake_dom import FakeElement, FakePage, make_executor


def _engine(policy: ResolvePolicy | None = None) -> LocatorEngine:
    return LocatorEngine(
        timing=TimingModel(rng=random.Random(7)), policy=policy or ResolvePolicy()
    )


def test_attribute_probe_css():
    assert AttributeProbe("id", "phoneCountry", tag="select").css() == 'select[id*="phoneCountry"]'
    assert (
        AttributeProbe("aria-label", "location", tag="input", ignore_case=True).css()
        == 'input[aria-label*="location" i]'
    )
    assert AttributeProbe("name", "session_key", mode="equals").css() == '*[name="session_key"]'
    assert AttributeProbe("href", "/jobs", tag="a", mode="prefix").css() == 'a[href^="/jobs"]'


def test_first_visible_candidate_in_probe_order_wins_and_short_circuits():
    page = FakePage()
    hidden = page.add("#first", FakeElement("hidden", visible=False))
    winner = page.add("#second", FakeElement("winner"))
    page.add("#third", FakeElement("never"))
    target = Target(
        name="thing",
        probes=(
            StructuralProbe("#first"),
            StructuralProbe("#second"),
            StructuralProbe("#third"),
        ),
    )

    candidate = _engine().resolve(target, page)

    assert candidate is not None
    assert candidate.handle is winner
    assert candidate.probe == StructuralProbe("#second")
    assert hidden.visibility_checks == 1
    assert "#third" not in page.queries


def test_require_enabled_skips_disabled_candidates():
    page = FakePage()
    page.add("button.go", FakeElement("Go", enabled=False))
    enabled = page.add("button.go", FakeElement("Go"))
    target = Target(name="Go", probes=(StructuralProbe("button.go"),), require_enabled=True)

    candidate = _engine().resolve(target, page)

    assert candidate.handle is enabled


def test_candidate_state_is_read_live():
    page = FakePage()
    el = page.add("#x", FakeElement())
    target = Target(name="x", probes=(StructuralProbe("#x"),))
    candidate = _engine().attempt(target, page)

    assert candidate.visible is True
    el.visible = False
    assert candidate.visible is False
    assert candidate.interactable is False


def test_easy_apply_found_by_text_when_attribute_probes_miss():
    page = FakePage()
    button = page.add("button", FakeElement("Easy Apply to Acme"))

    candidate = _engine().resolve(EASY_APPLY, page)

    assert candidate is not None
    assert candidate.handle is button
    assert isinstance(candidate.probe, TextProbe)


def test_probe_error_is_treated_as_no_candidates():
    page = FakePage()
    page.failing_selectors.add("#broken")
    ok = page.add("#ok", FakeElement())
    target = Target(name="ok", probes=(StructuralProbe("#broken"), StructuralProbe("#ok")))

    assert _engine().resolve(target, page).handle is ok


def test_exact_text_probe_only_matches_whole_text():
    page = FakePage()
    page.add("a", FakeElement("Show all jobs"))
    exact = page.add("a", FakeElement("  Show all "))

    handles = TextProbe("Show all", tag="a", exact=True).query(page)

    assert handles == [exact]


def test_scroll_retries_rerun_probes_after_each_scroll():
    page = FakePage()
    late = FakeElement("Show all")

    def reveal(p, scroll_count):
        if scroll_count == 2:
            p.add("a.more", late)

    page.on_scroll = reveal
    target = Target(
        name="Show all",
        probes=(StructuralProbe("a.more"),),
        scroll_retries=5,
        fallback_scan=False,
    )

    candidate = _engine().resolve(target, page)

    assert candidate.handle is late
    assert len(page.scrolls) == 2
    assert all(300 <= dy < 500 for dy in page.scrolls)
    assert len(page.waits) == 2
    assert all(800 <= ms < 1500 for ms in page.waits)


def test_scroll_retries_are_capped_by_policy():
    page = FakePage()
    target = Target(
        name="missing",
        probes=(StructuralProbe("#nothing"),),
        scroll_retries=10,
        fallback_scan=False,
    )

    assert _engine(ResolvePolicy(max_scroll_retries=3)).resolve(target, page) is None
    assert len(page.scrolls) == 3


def test_attempt_never_scrolls_or_waits():
    page = FakePage()
    target = Target(name="missing", probes=(StructuralProbe("#nothing"),), scroll_retries=5)

    assert _engine().attempt(target, page) is None
    assert page.scrolls == []
    assert page.waits == []


def test_fallback_scan_uses_text_hints_case_insensitively():
    page = FakePage()
    found = FakeElement("SEE MORE")
    seen_args = []

    def scan(arg):
        seen_args.append(arg)
        return found if "see more" in arg["needles"] else None

    page.scripts["needles"] = scan
    target = Target(
        name="Show all",
        probes=(StructuralProbe("#nothing"),),
        text_hints=("Show all", "See more"),
    )

    candidate = _engine().resolve(target, page)

    assert candidate.handle is found
    assert isinstance(candidate.probe, ScriptProbe)
    assert seen_args[0]["needles"] == ["show all", "see more"]


def test_fallback_scan_defaults_to_target_name():
    page = FakePage()
    seen_args = []
    page.scripts["needles"] = lambda arg: seen_args.append(arg)
    target = Target(name="Easy Apply", probes=())

    assert _engine().resolve(target, page) is None
    assert seen_args == [{"needles": ["easy apply"]}]


def test_no_scan_when_fallback_disabled():
    page = FakePage()
    page.scripts["needles"] = lambda arg: pytest.fail("scan should not run")
    target = Target(name="x", probes=(StructuralProbe("#nothing"),), fallback_scan=False)

    assert _engine().resolve(target, page) is None


def test_resolve_raises_when_page_is_closed():
    page = FakePage()
    page.closed = True
    target = Target(name="x", probes=(StructuralProbe("#x"),))

    with pytest.raises(SessionUnavailableError):
        _engine().resolve(target, page)


def test_fallback_scan_ignores_disabled_element_when_enabled_required():
    page = FakePage()
    disabled = page.add(".jobs-apply-button", FakeElement("Easy Apply", enabled=False))
    page.scripts["needles"] = disabled

    assert _engine().resolve(EASY_APPLY, page) is None


def test_disabled_easy_apply_is_not_clicked():
    page = FakePage()
    disabled = page.add(".jobs-apply-button", FakeElement("Easy Apply", enabled=False))
    page.scripts["needles"] = disabled

    result = make_executor().click(EASY_APPLY, page)

    assert result.status == "not_found"
    assert disabled.clicks == []
