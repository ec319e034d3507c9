"""Process-wide optional feature flags with explicit change subscription."""

import logging
from typing import Callable, Dict, List

from ..database.kv_store import FEATURE_TOGGLES_KEY, KeyValueStore
from ..errors import CorruptValueError


logger = logging.getLogger(__name__)


GAMIFICATION = "gamification"
COLLABORATION_TOOLS = "collaboration_tools"
SUBJECT_DEEP_DIVE_PROMPTS = "subject_deep_dive_prompts"

DEFAULT_FEATURE_TOGGLES: Dict[str, bool] = {
    GAMIFICATION: False,
    COLLABORATION_TOOLS: True,
    SUBJECT_DEEP_DIVE_PROMPTS: True,
}

ToggleListener = Callable[[Dict[str, bool]], None]


class FeatureToggleStore:
    """
    Persisted map of optional feature name to enabled flag.

    Listeners registered with subscribe() receive the full map after every
    successful set(). Unknown persisted names are ignored; features missing
    from persisted data take their default.
    """

    def __init__(self, kv_store: KeyValueStore):
        self.kv_store = kv_store
        self._listeners: List[ToggleListener] = []

    def get(self) -> Dict[str, bool]:
        toggles = dict(DEFAULT_FEATURE_TOGGLES)
        try:
            stored = self.kv_store.get(FEATURE_TOGGLES_KEY)
        except CorruptValueError as e:
            logger.warning(f"Ignoring unreadable feature toggles: {e}")
            return toggles
        if isinstance(stored, dict):
            for name, enabled in stored.items():
                if name in toggles and isinstance(enabled, bool):
                    toggles[name] = enabled
        elif stored is not None:
            logger.warning(f"Ignoring malformed feature toggles: {stored!r}")
        return toggles

    def is_enabled(self, feature: str) -> bool:
        self._check_feature(feature)
        return self.get()[feature]

    def set(self, feature: str, enabled: bool) -> Dict[str, bool]:
        """Persist one flag and broadcast the resulting map."""
        self._check_feature(feature)
        toggles = self.get()
        toggles[feature] = bool(enabled)
        self.kv_store.set(FEATURE_TOGGLES_KEY, toggles)
        logger.info(f"Feature {feature} {'enabled' if enabled else 'disabled'}")

        for listener in list(self._listeners):
            listener(dict(toggles))
        return toggles

    def subscribe(self, listener: ToggleListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _check_feature(self, feature: str):
        if feature not in DEFAULT_FEATURE_TOGGLES:
            raise ValueError(
                f"Unknown feature: {feature}. Known features: {', '.join(DEFAULT_FEATURE_TOGGLES)}"
            )
