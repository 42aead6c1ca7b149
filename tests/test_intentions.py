from innerfield.dates import DAY_MS
from innerfield.intentions import (
    INTENTION_SET_AT_KEY,
    INTENTIONS_KEY,
    IntentionStore,
    format_intentions,
    has_intention,
    normalize_selection,
)

T0 = 1_740_000_000_000


def _store(store, now=T0):
    return IntentionStore(store, clock=lambda: now)


def test_normalize_selection():
    assert normalize_selection([" Calm", "CLARITY", "calm", "healing"]) == ["calm", "clarity"]
    assert normalize_selection(["joy", "grounding"]) == ["grounding"]
    assert normalize_selection(None) == []
    assert normalize_selection("calm") == []


def test_set_and_get(store):
    intentions = _store(store)
    assert intentions.set_intentions(["calm", "expansion"]) == ["calm", "expansion"]
    assert intentions.get_intentions() == ["calm", "expansion"]
    assert intentions.get_intention_set_at() == T0


def test_set_at_moves_only_on_change(store):
    intentions = _store(store)
    intentions.set_intentions(["calm"], now=1000)
    intentions.set_intentions(["calm"], now=5000)
    assert intentions.get_intention_set_at() == 1000
    intentions.set_intentions(["clarity"], now=9000)
    assert intentions.get_intention_set_at() == 9000


def test_missing_set_at_is_backfilled(store):
    intentions = _store(store)
    intentions.set_intentions(["calm"], now=1000)
    store.remove(INTENTION_SET_AT_KEY)
    intentions.set_intentions(["calm"], now=2000)
    assert intentions.get_intention_set_at() == 2000


def test_empty_selection_clears(store):
    intentions = _store(store)
    intentions.set_intentions(["calm"])
    assert intentions.set_intentions([]) == []
    assert intentions.get_intentions() == []
    assert intentions.get_intention_set_at() is None


def test_malformed_values(store):
    store.set(INTENTIONS_KEY, "{oops")
    store.set(INTENTION_SET_AT_KEY, "not a number")
    intentions = _store(store)
    assert intentions.get_intentions() == []
    assert intentions.get_intention_set_at() is None


def test_current_nudge_needs_timeline(store):
    assert _store(store).current_nudge() is None


def test_current_nudge_and_cooldown(store):
    _store(store, now=T0).set_intentions(["healing"])
    later = _store(store, now=T0 + 8 * DAY_MS)
    nudge = later.current_nudge()
    assert nudge.category == "healing"
    assert nudge.stage == "reflect"

    later.mark_nudge_shown()
    assert later.get_last_nudge_shown_at() == T0 + 8 * DAY_MS
    assert later.current_nudge() is None
    assert later.current_nudge(now=T0 + 15 * DAY_MS).stage == "invite"

    later.clear_last_nudge_shown_at()
    assert later.get_last_nudge_shown_at() is None
    assert later.current_nudge() is not None


def test_two_intentions_give_mixed_nudge(store):
    _store(store, now=T0).set_intentions(["clarity", "calm"])
    nudge = _store(store, now=T0 + 3 * DAY_MS).current_nudge()
    assert nudge.category == "mixed"


def test_failing_store_is_quiet(failing_store):
    intentions = IntentionStore(failing_store, clock=lambda: T0)
    assert intentions.set_intentions(["calm"]) == ["calm"]
    assert intentions.get_intentions() == []
    assert intentions.current_nudge() is None
    intentions.clear_intentions()


def test_format_intentions():
    assert format_intentions([]) == ""
    assert format_intentions(["calm"]) == "Calm"
    assert format_intentions(["calm", "expansion"]) == "Calm & Expansion"
    assert has_intention(["calm"], "calm")
    assert not has_intention(["calm"], "healing")
