"""
Data access layer for the growth advisor.

Provides the read-only repository ports over student records and the local
key-value persistence used for layouts, overrides, goals and feature toggles.
"""

from .repository import (
    StudentRepository,
    InMemoryStudentRepository,
    load_demo_repository
)

from .kv_store import (
    KeyValueStore,
    InMemoryKeyValueStore,
    SQLiteKeyValueStore,
    create_kv_store,
    widget_config_key,
    override_key,
    goal_key,
    FEATURE_TOGGLES_KEY
)

__all__ = [
    # Repository ports
    'StudentRepository',
    'InMemoryStudentRepository',
    'load_demo_repository',

    # Key-value persistence
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'SQLiteKeyValueStore',
    'create_kv_store',
    'widget_config_key',
    'override_key',
    'goal_key',
    'FEATURE_TOGGLES_KEY',
]
