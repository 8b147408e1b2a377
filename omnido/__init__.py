"""
OMNIDO - Personal Productivity Store
====================================

Tasks, kanban projects, habits, notes and mind-maps, persisted as one
JSON document per collection.

Usage:
    from omnido import EntityStore

    store = EntityStore()
    task_id = store.add_task("Write report", deadline)
    store.toggle_task(task_id)

    # Timeline view
    timeline = store.timeline()
    for bucket in timeline.upcoming:
        print(bucket.day, [t.title for t in bucket.tasks])
"""

from .schema import (
    Task,
    Project,
    ProjectTask,
    Habit,
    Note,
    MindMap,
    MindMapNode,
    Point,
    Column,
    NodeStatus,
    COLUMNS,
    day_key,
)
from .config import Config
from .storage import Storage, FileStorage, MemoryStorage, StorageError
from .timeline import Timeline, DayBucket, build_timeline
from .manager import EntityStore

__version__ = "1.0.0"
__all__ = [
    "EntityStore",
    "Config",
    "Storage",
    "FileStorage",
    "MemoryStorage",
    "StorageError",
    "Task",
    "Project",
    "ProjectTask",
    "Habit",
    "Note",
    "MindMap",
    "MindMapNode",
    "Point",
    "Column",
    "NodeStatus",
    "COLUMNS",
    "day_key",
    "Timeline",
    "DayBucket",
    "build_timeline",
]
