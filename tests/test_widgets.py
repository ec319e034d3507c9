"""Tests for WidgetLayoutStore."""

import random
import sqlite3

import pytest

from growth_advisor.advisor import OverrideStore, WidgetLayoutStore
from growth_advisor.database import SQLiteKeyValueStore, widget_config_key
from growth_advisor.errors import LayoutNotLoadedError, UnknownWidgetError
from growth_advisor.models import MoveDirection, WidgetId, default_widgets


A = WidgetId.GROWTH_SNAPSHOT.value
B = WidgetId.ATTENDANCE_SUMMARY.value
C = WidgetId.ASSIGNMENT_SUMMARY.value


def _orders(snapshot):
    return {w.id: w.order for w in snapshot}


def _ids(snapshot):
    return [w.id for w in snapshot]


class TestDefaults:

    def test_default_map(self):
        """The default map has thirteen widgets with only the scoreboard hidden."""
        widgets = default_widgets()

        assert len(widgets) == 13
        assert [w.order for w in widgets] == list(range(1, 14))
        hidden = [w.id for w in widgets if not w.is_visible]
        assert hidden == [WidgetId.GAMIFIED_SCOREBOARD.value]

    def test_load_without_persisted_data(self, layout):
        """Loading with nothing stored gives the defaults."""
        snapshot = layout.load("S005")
        assert snapshot == default_widgets()

    def test_visible_widgets_exclude_hidden(self, layout):
        """Visible widgets skip hidden ones and keep their order."""
        layout.load("S005")
        visible = layout.visible_widgets()

        assert WidgetId.GAMIFIED_SCOREBOARD.value not in _ids(visible)
        assert [w.order for w in visible] == sorted(w.order for w in visible)


class TestScenario:
    """Three leading widgets A, B, C through move, hide and reset."""

    def test_move_hide_restore(self, layout):
        """Move, hide and restore behave as expected on the first three widgets."""
        layout.load("S005")

        layout.move(B, MoveDirection.DOWN)
        orders = _orders(layout.snapshot())
        assert (orders[A], orders[C], orders[B]) == (1, 2, 3)

        layout.set_visibility(A, False)
        snapshot = layout.snapshot()
        assert next(w for w in snapshot if w.id == A).is_visible is False
        orders = _orders(snapshot)
        assert (orders[A], orders[C], orders[B]) == (1, 2, 3)

        snapshot = layout.restore_defaults("S005")
        orders = _orders(snapshot)
        assert (orders[A], orders[B], orders[C]) == (1, 2, 3)
        assert snapshot == default_widgets()


class TestMove:

    def test_first_up_is_noop(self, layout, kv_store):
        """Moving the first widget up changes and writes nothing."""
        layout.load("S005")
        before = layout.snapshot()

        assert layout.move(A, "up") == before
        assert kv_store.get(widget_config_key("S005")) is None

    def test_last_down_is_noop(self, layout):
        """Moving the last widget down changes nothing."""
        before = layout.load("S005")
        last = before[-1].id

        assert layout.move(last, "down") == before

    def test_move_hidden_widget(self, layout):
        """Hidden widgets can still be moved."""
        layout.load("S005")
        last = WidgetId.GAMIFIED_SCOREBOARD.value

        snapshot = layout.move(last, "up")

        assert _ids(snapshot)[-2] == last

    def test_move_renumbers_gapped_state(self, layout, kv_store):
        """A move renumbers gapped orders to 1..N."""
        gapped = [w.model_dump() for w in default_widgets()]
        for i, entry in enumerate(gapped):
            entry["order"] = (i + 1) * 10
        kv_store.set(widget_config_key("S005"), gapped)

        layout.load("S005")
        snapshot = layout.move(B, "up")

        assert [w.order for w in snapshot] == list(range(1, 14))
        assert _ids(snapshot)[:2] == [B, A]

    def test_contiguity_under_random_operations(self, layout):
        """Orders stay exactly 1..N under random moves and visibility changes."""
        layout.load("S005")
        rng = random.Random(1234)
        ids = [w.value for w in WidgetId]

        for _ in range(300):
            widget_id = rng.choice(ids)
            if rng.random() < 0.3:
                layout.set_visibility(widget_id, rng.random() < 0.5)
            else:
                layout.move(widget_id, rng.choice(["up", "down"]))

            orders = sorted(w.order for w in layout.snapshot())
            assert orders == list(range(1, len(ids) + 1))

    def test_invalid_direction(self, layout):
        """Unknown move directions raise ValueError."""
        layout.load("S005")
        with pytest.raises(ValueError):
            layout.move(A, "sideways")


class TestPersistence:

    def test_every_mutation_persists(self, layout, kv_store, overrides, toggles):
        """Every change is visible to a freshly loaded store."""
        layout.load("S005")
        layout.set_visibility(C, False)
        layout.move(A, "down")

        reloaded = WidgetLayoutStore(kv_store, overrides, toggles)
        snapshot = reloaded.load("S005")
        reloaded.close()

        assert _ids(snapshot)[:2] == [B, A]
        assert next(w for w in snapshot if w.id == C).is_visible is False

    def test_layouts_are_per_student(self, layout, kv_store):
        """Each student has their own layout."""
        layout.load("S001")
        layout.set_visibility(A, False)

        snapshot = layout.load("S005")

        assert next(w for w in snapshot if w.id == A).is_visible is True

    def test_restore_defaults_clears_overrides(self, layout, overrides):
        """Restoring defaults clears only that student's overrides."""
        layout.load("S005")
        overrides.set("S005", "growthSummary", "Edited")
        overrides.set("S005", "strengths", "A, B")
        overrides.set("S001", "growthSummary", "Other student")

        layout.restore_defaults("S005")

        for field in ["growthSummary", "strengths", "focusAreas"]:
            assert overrides.get("S005", field) is None
        assert overrides.get("S001", "growthSummary") == "Other student"


class TestMerge:
    """Loading merges persisted data over the current default map."""

    def test_unknown_ids_dropped_and_new_ids_added(self, layout, kv_store):
        """Retired ids are dropped and missing widgets take their defaults."""
        kv_store.set(widget_config_key("S005"), [
            {"id": "retiredWidget", "display_name": "Old", "is_visible": True, "order": 1, "icon_ref": ""},
            {"id": B, "display_name": "Attendance Overview", "is_visible": False, "order": 1, "icon_ref": "CalendarDays"},
        ])

        snapshot = layout.load("S005")

        assert "retiredWidget" not in _ids(snapshot)
        assert len(snapshot) == 13
        assert [w.order for w in snapshot] == list(range(1, 14))
        assert _ids(snapshot)[:2] == [A, B]
        assert next(w for w in snapshot if w.id == B).is_visible is False

    def test_legacy_map_format(self, layout, kv_store):
        """Layouts stored as an id-keyed map still load."""
        kv_store.set(widget_config_key("S005"), {
            C: {"id": C, "isVisible": True, "order": 1, "is_visible": False},
        })

        snapshot = layout.load("S005")

        assert next(w for w in snapshot if w.id == C).is_visible is False

    @pytest.mark.parametrize("corrupt", ["garbage", 42, [1, 2, 3], [{"id": "actionPlan", "order": -4}]])
    def test_corrupt_data_falls_back_to_defaults(self, layout, kv_store, corrupt):
        """Corrupt stored layouts fall back to the defaults."""
        kv_store.set(widget_config_key("S005"), corrupt)

        assert layout.load("S005") == default_widgets()

    def test_undecodable_row_falls_back_to_defaults(self, tmp_path):
        """A stored layout that is not valid JSON is logged and replaced by the defaults."""
        path = tmp_path / "state.sqlite3"
        store = SQLiteKeyValueStore(path)
        with sqlite3.connect(path) as conn:
            conn.execute("INSERT INTO kv_store (key, value) VALUES (?, ?)", (widget_config_key("S005"), "{not json"))

        layout = WidgetLayoutStore(store, OverrideStore(store))
        snapshot = layout.load("S005")

        assert snapshot == default_widgets()
        layout.move(B, "up")
        assert store.get(widget_config_key("S005"))[0]["id"] == B


class TestErrors:

    def test_unknown_widget(self, layout):
        """Unknown widget ids raise UnknownWidgetError."""
        layout.load("S005")
        with pytest.raises(UnknownWidgetError):
            layout.set_visibility("noSuchWidget", True)
        with pytest.raises(KeyError):
            layout.move("noSuchWidget", "up")

    def test_mutation_before_load(self, layout):
        """Using the store before load() raises LayoutNotLoadedError."""
        with pytest.raises(LayoutNotLoadedError):
            layout.set_visibility(A, False)
        with pytest.raises(LayoutNotLoadedError):
            layout.snapshot()


class TestGamificationToggle:

    def test_toggle_broadcast_shows_scoreboard(self, layout, toggles):
        """Enabling gamification shows the scoreboard."""
        layout.load("S005")

        toggles.set("gamification", True)

        scoreboard = next(w for w in layout.snapshot() if w.id == WidgetId.GAMIFIED_SCOREBOARD.value)
        assert scoreboard.is_visible is True

    def test_load_applies_current_toggle(self, layout, toggles):
        """Loading applies the current gamification toggle."""
        toggles.set("gamification", True)

        snapshot = layout.load("S005")

        scoreboard = next(w for w in snapshot if w.id == WidgetId.GAMIFIED_SCOREBOARD.value)
        assert scoreboard.is_visible is True

    def test_closed_store_stops_listening(self, layout, toggles):
        """A closed store ignores toggle changes."""
        layout.load("S005")
        layout.close()

        toggles.set("gamification", True)

        scoreboard = next(w for w in layout.snapshot() if w.id == WidgetId.GAMIFIED_SCOREBOARD.value)
        assert scoreboard.is_visible is False
