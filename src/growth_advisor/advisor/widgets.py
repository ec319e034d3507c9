"""
Persisted, per-student widget layout for the growth report sections.

The layout is the default widget map merged with whatever was persisted for
the student. Every mutation writes the full list back under
widgetConfig:<student_id> immediately; there is no separate save step.

Orders are always exactly 1..N over the known widget ids: load() renumbers
after merging and move() renumbers after every swap.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..database.kv_store import KeyValueStore, widget_config_key
from ..errors import CorruptValueError, LayoutNotLoadedError, UnknownWidgetError
from ..models import MoveDirection, WidgetConfig, WidgetId, default_widget_map
from .feature_toggles import GAMIFICATION, FeatureToggleStore
from .overrides import OverrideStore


logger = logging.getLogger(__name__)


class WidgetLayoutStore:
    """Visibility and ordering of report sections for one loaded student."""

    def __init__(
        self,
        kv_store: KeyValueStore,
        override_store: OverrideStore,
        feature_toggles: Optional[FeatureToggleStore] = None
    ):
        self.kv_store = kv_store
        self.override_store = override_store
        self.feature_toggles = feature_toggles

        self._student_id: Optional[str] = None
        self._widgets: Dict[str, WidgetConfig] = {}
        self._unsubscribe: Optional[Callable[[], None]] = None
        if feature_toggles is not None:
            self._unsubscribe = feature_toggles.subscribe(self._on_toggles_changed)

    @property
    def student_id(self) -> Optional[str]:
        return self._student_id

    def load(self, student_id: str) -> List[WidgetConfig]:
        """Load the persisted layout for a student, merged over the defaults."""
        defaults = default_widget_map()
        persisted = self._read_persisted(student_id, defaults)

        merged = {widget_id: persisted.get(widget_id, default) for widget_id, default in defaults.items()}

        # Ties (e.g. a new default widget landing on a persisted order) fall back to default order
        ranked = sorted(merged.values(), key=lambda w: (w.order, defaults[w.id].order))
        self._widgets = {w.id: w for w in ranked}
        self._renumber(ranked)

        self._student_id = student_id
        logger.debug(f"Loaded widget layout for {student_id}", extra={"persisted": len(persisted)})

        if self.feature_toggles is not None:
            self._sync_gamification(self.feature_toggles.get())

        return self.snapshot()

    def snapshot(self) -> List[WidgetConfig]:
        """All widgets, hidden included, ascending by order."""
        self._require_loaded()
        return [w.model_copy() for w in self._ordered()]

    def visible_widgets(self) -> List[WidgetConfig]:
        return [w for w in self.snapshot() if w.is_visible]

    def set_visibility(self, widget_id: Union[str, WidgetId], visible: bool) -> WidgetConfig:
        """Show or hide one widget without touching any order."""
        widget = self._get(widget_id)
        updated = widget.model_copy(update={"is_visible": bool(visible)})
        self._widgets[updated.id] = updated
        self._persist()
        return updated.model_copy()

    def move(self, widget_id: Union[str, WidgetId], direction: Union[str, MoveDirection]) -> List[WidgetConfig]:
        """
        Swap a widget with its neighbour and renumber every order to 1..N.

        Moving the first widget up or the last widget down is a no-op and
        writes nothing.
        """
        widget = self._get(widget_id)
        direction = MoveDirection(direction)

        ordered = self._ordered()
        index = next(i for i, w in enumerate(ordered) if w.id == widget.id)
        target = index - 1 if direction == MoveDirection.UP else index + 1
        if target < 0 or target >= len(ordered):
            return self.snapshot()

        ordered[index], ordered[target] = ordered[target], ordered[index]
        self._renumber(ordered)
        self._persist()
        return self.snapshot()

    def restore_defaults(self, student_id: Optional[str] = None) -> List[WidgetConfig]:
        """Reset to the default map exactly and clear the student's content overrides."""
        student_id = student_id or self._student_id
        if student_id is None:
            raise LayoutNotLoadedError("No student given and no layout loaded")

        self._student_id = student_id
        self._widgets = default_widget_map()
        self._persist()
        self.override_store.clear_all(student_id)
        logger.info("Widget layout restored to defaults", extra={"student_id": student_id})
        return self.snapshot()

    def close(self):
        """Stop listening for feature toggle changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _read_persisted(self, student_id: str, defaults: Dict[str, WidgetConfig]) -> Dict[str, WidgetConfig]:
        try:
            raw = self.kv_store.get(widget_config_key(student_id))
        except CorruptValueError as e:
            logger.warning(f"Unreadable widget layout for {student_id}, using defaults: {e}")
            return {}
        if raw is None:
            return {}

        # Older layouts were stored as a map keyed by widget id
        entries: Any = list(raw.values()) if isinstance(raw, dict) else raw
        if not isinstance(entries, list):
            logger.warning(f"Corrupt widget layout for {student_id}, using defaults")
            return {}

        persisted = {}
        for entry in entries:
            if not isinstance(entry, dict) or entry.get("id") not in defaults:
                continue
            try:
                widget = WidgetConfig.model_validate({**defaults[entry["id"]].model_dump(), **entry})
            except PydanticValidationError as e:
                logger.warning(f"Dropping corrupt widget entry {entry.get('id')} for {student_id}: {e}")
                continue
            persisted[widget.id] = widget
        return persisted

    def _on_toggles_changed(self, toggles: Dict[str, bool]):
        if self._student_id is None:
            return
        self._sync_gamification(toggles)

    def _sync_gamification(self, toggles: Dict[str, bool]):
        enabled = toggles.get(GAMIFICATION, False)
        scoreboard = self._widgets.get(WidgetId.GAMIFIED_SCOREBOARD.value)
        if scoreboard is not None and scoreboard.is_visible != enabled:
            self.set_visibility(WidgetId.GAMIFIED_SCOREBOARD, enabled)

    def _get(self, widget_id: Union[str, WidgetId]) -> WidgetConfig:
        self._require_loaded()
        key = widget_id.value if isinstance(widget_id, WidgetId) else widget_id
        if key not in self._widgets:
            raise UnknownWidgetError(f"Unknown widget: {key}")
        return self._widgets[key]

    def _require_loaded(self):
        if self._student_id is None:
            raise LayoutNotLoadedError("Widget layout has not been loaded")

    def _ordered(self) -> List[WidgetConfig]:
        return sorted(self._widgets.values(), key=lambda w: w.order)

    def _renumber(self, ordered: List[WidgetConfig]):
        for position, widget in enumerate(ordered, start=1):
            self._widgets[widget.id] = widget.model_copy(update={"order": position})

    def _persist(self):
        self.kv_store.set(
            widget_config_key(self._student_id),
            [w.model_dump() for w in self._ordered()]
        )
