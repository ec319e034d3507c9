"""Tests for OverrideStore."""

import pytest

from growth_advisor.advisor import OverrideField, split_items


class TestSplitItems:

    def test_delimited_text(self):
        """Comma-separated text is split and trimmed, dropping empty items."""
        assert split_items(" Math ,  , Physics,Chemistry ,") == ["Math", "Physics", "Chemistry"]

    def test_list_input(self):
        """List input is trimmed and empty items dropped."""
        assert split_items(["  a", "", "b  "]) == ["a", "b"]

    def test_empty_text(self):
        """Empty text gives an empty list."""
        assert split_items("") == []


class TestOverrideStore:

    def test_unset_field_is_none(self, overrides):
        """Fields without an override read as None."""
        for field in OverrideField:
            assert overrides.get("S005", field) is None

    def test_text_override(self, overrides):
        """Text fields are stored as given."""
        overrides.set("S005", "growthSummary", "My own summary")
        assert overrides.get("S005", OverrideField.GROWTH_SUMMARY) == "My own summary"

    def test_list_override_from_text(self, overrides):
        """List fields are split from delimited text."""
        stored = overrides.set("S005", "strengths", "Algebra,  Robotics , ")

        assert stored == ["Algebra", "Robotics"]
        assert overrides.get("S005", "strengths") == ["Algebra", "Robotics"]

    def test_empty_list_override_is_kept(self, overrides):
        """An override that splits to nothing is still an override."""
        overrides.set("S005", "focusAreas", " , ")
        assert overrides.get("S005", "focusAreas") == []

    def test_overrides_are_independent_per_student(self, overrides):
        """Overrides are scoped to one student."""
        overrides.set("S001", "growthSummary", "Alice")
        assert overrides.get("S005", "growthSummary") is None

    def test_unknown_field(self, overrides):
        """Only the overridable fields are accepted."""
        with pytest.raises(ValueError, match="Unknown override field"):
            overrides.set("S005", "careerPathways", "x")
        with pytest.raises(ValueError):
            overrides.get("S005", "nope")

    def test_text_field_rejects_list(self, overrides):
        """The summary override must be text."""
        with pytest.raises(ValueError):
            overrides.set("S005", "growthSummary", ["a", "b"])

    def test_clear_all(self, overrides, kv_store):
        """Clearing removes every override for the student."""
        overrides.set("S005", "growthSummary", "x")
        overrides.set("S005", "focusAreas", "y")

        assert overrides.clear_all("S005") == 2
        assert kv_store.keys("override:") == []
