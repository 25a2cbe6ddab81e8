import pytest

from selection import (
    IDLE, Clear, Click, Enter, Leave, MetricChange, SelectionState, apply_events, transition,
)

KNOWN = {"ES", "DE", "IT"}


def run(*events, state=IDLE, known=KNOWN):
    for e in events:
        state = transition(state, e, known)
    return state


def test_idle_has_no_active_code():
    assert IDLE.active_code is None
    assert IDLE.is_idle


def test_hover_and_leave():
    s = run(Enter("ES"))
    assert s == SelectionState(hovered="ES")
    assert s.active_code == "ES"
    assert run(Leave(), state=s) == IDLE


def test_hover_moves_between_countries():
    assert run(Enter("ES"), Enter("DE")).active_code == "DE"


def test_click_pins_and_sets_hover():
    s = run(Click("ES"))
    assert s == SelectionState(hovered="ES", pinned="ES")


def test_click_twice_returns_to_idle():
    assert run(Click("ES"), Click("ES")) == IDLE


def test_click_other_country_moves_pin():
    s = run(Click("ES"), Click("DE"))
    assert s.pinned == "DE"
    assert s.active_code == "DE"


def test_pin_suppresses_hover_and_leave():
    pinned = run(Click("ES"))
    after = run(Enter("DE"), state=pinned)
    assert after == pinned
    assert after.hovered == "ES"
    assert run(Leave(), state=pinned) == pinned


def test_pin_scenario():
    s = run(Click("ES"))
    assert s.pinned == "ES"
    s = run(Enter("DE"), state=s)
    assert s.active_code == "ES"
    s = run(Click("ES"), state=s)
    assert s == IDLE


def test_pinned_overrides_hovered():
    assert SelectionState(hovered="DE", pinned="ES").active_code == "ES"


def test_metric_change_keeps_state():
    s = run(Click("ES"))
    assert run(MetricChange(), state=s) is s
    h = run(Enter("DE"))
    assert run(MetricChange(), state=h) is h


@pytest.mark.parametrize("state", [IDLE, SelectionState(hovered="ES"), SelectionState("ES", "ES")])
def test_clear_always_idle(state):
    assert transition(state, Clear()) == IDLE


@pytest.mark.parametrize("event", [Enter("FR"), Click("FR")])
def test_unknown_code_is_noop(event):
    s = SelectionState(hovered="ES")
    assert transition(s, event, KNOWN) is s


def test_without_known_codes_everything_accepted():
    assert transition(IDLE, Enter("FR")).hovered == "FR"


def test_unknown_event_type():
    with pytest.raises(TypeError):
        transition(IDLE, object())


# ── Same-tick batches ────────────────────────────────────────


def test_click_wins_over_concurrent_hover():
    s = apply_events(IDLE, [Click("ES"), Enter("DE")], KNOWN)
    assert s == SelectionState(hovered="ES", pinned="ES")


def test_unpin_while_hovering_other_country():
    pinned = run(Click("ES"))
    s = apply_events(pinned, [Click("ES"), Enter("DE")], KNOWN)
    assert s == IDLE


def test_clear_applied_last():
    assert apply_events(IDLE, [Clear(), Click("ES")], KNOWN) == IDLE


def test_empty_batch():
    s = SelectionState(hovered="IT")
    assert apply_events(s, [], KNOWN) is s


# ── Store round-trip ─────────────────────────────────────────


def test_store_round_trip():
    s = SelectionState(hovered="DE", pinned="ES")
    assert SelectionState.from_store(s.to_store()) == s


@pytest.mark.parametrize("data", [None, {}, {"hovered": "", "pinned": None}])
def test_empty_store_is_idle(data):
    assert SelectionState.from_store(data) == IDLE
