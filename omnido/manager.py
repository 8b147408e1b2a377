"""
OMNIDO - Entity Store
=====================
Owns the five collections (tasks, projects, habits, notes, mind-maps).
Every public mutation is followed by a write-through of the owning
collection. Unknown ids are silent no-ops.
"""

import logging
import threading
from datetime import date, datetime
from typing import Optional, List, Dict, Any, Union, Tuple

from . import kanban, tree
from .config import Config
from .schema import (
    Column, Habit, MindMap, MindMapNode, Note, NodeStatus, Point, Project,
    ProjectTask, Task, COLLECTIONS, day_key, local_now, seed_collection
)
from .storage import FileStorage, Storage, StorageError, decode_collection, encode_collection
from .timeline import Timeline, build_timeline, upcoming_deadlines

logger = logging.getLogger("omnido")

PositionLike = Union[Point, Tuple[float, float]]


class EntityStore:
    """
    OmniDo Entity Store

    Primary storage: {data_dir}/{collection}.json via FileStorage
    Any Storage implementation can be injected instead.

    Key features:
    - Write-through persistence on every mutation
    - Best-effort load with seed defaults
    - Read accessors hand out deep copies only
    """

    def __init__(
        self,
        storage: Optional[Storage] = None,
        config: Optional[Config] = None
    ):
        self.config = config or Config()
        self.storage = storage if storage is not None else FileStorage(self.config.data_dir)
        self.last_write_error: Optional[StorageError] = None
        self._lock = threading.RLock()
        self._collections: Dict[str, List[Any]] = {}
        self.load()

    # ========================================
    # PERSISTENCE OPERATIONS
    # ========================================

    def load(self) -> None:
        """(Re)load every collection from storage"""
        with self._lock:
            for key in COLLECTIONS:
                self._collections[key] = self._load_collection(key)

    def _load_collection(self, key: str) -> List[Any]:
        try:
            data = self.storage.read(key)
        except StorageError as e:
            logger.warning(f"Could not read {key}: {e}")
            data = None

        if data is not None:
            try:
                items = decode_collection(key, data)
                logger.debug(f"📂 Loaded {key}: {len(items)} item(s)")
                return items
            except ValueError as e:
                logger.warning(f"Unreadable {key} data, using defaults: {e}")

        if self.config.seed_defaults:
            return seed_collection(key)
        return []

    def save(self, key: str) -> bool:
        """Write one whole collection through to storage"""
        payload = encode_collection(key, self._collections[key])
        try:
            self.storage.write(key, payload)
        except StorageError as e:
            # In-memory state stays authoritative for this process
            self.last_write_error = e
            logger.warning(f"Failed to save {key}: {e}")
            return False
        self.last_write_error = None
        logger.debug(f"💾 Saved {key} ({len(self._collections[key])} item(s))")
        return True

    # ========================================
    # TASK OPERATIONS
    # ========================================

    @property
    def _tasks(self) -> List[Task]:
        return self._collections["tasks"]

    def tasks(self) -> List[Task]:
        with self._lock:
            return [task.model_copy(deep=True) for task in self._tasks]

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self._find(self._tasks, task_id)
            return task.model_copy(deep=True) if task else None

    def add_task(self, title: str, deadline: datetime) -> str:
        with self._lock:
            task = Task(title=title, deadline=deadline)
            self._tasks.append(task)
            self.save("tasks")
        logger.info(f"➕ Added task: {task.title} ({task.id})")
        return task.id

    def update_task(
        self,
        task_id: str,
        title: Optional[str] = None,
        deadline: Optional[datetime] = None,
        completed: Optional[bool] = None
    ) -> None:
        with self._lock:
            task = self._find(self._tasks, task_id)
            if task:
                self._apply(task, title=title, deadline=deadline, completed=completed)
            self.save("tasks")

    def toggle_task(self, task_id: str) -> None:
        with self._lock:
            task = self._find(self._tasks, task_id)
            if task:
                task.completed = not task.completed
                logger.info(f"{'✅' if task.completed else '⬜'} Task {task.title} ({task_id})")
            self.save("tasks")

    def delete_task(self, task_id: str) -> None:
        with self._lock:
            self._collections["tasks"] = self._without(self._tasks, task_id)
            self.save("tasks")

    # ========================================
    # PROJECT / KANBAN OPERATIONS
    # ========================================

    @property
    def _projects(self) -> List[Project]:
        return self._collections["projects"]

    def projects(self) -> List[Project]:
        with self._lock:
            return [project.model_copy(deep=True) for project in self._projects]

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            project = self._find(self._projects, project_id)
            return project.model_copy(deep=True) if project else None

    def add_project(self, name: str) -> str:
        with self._lock:
            project = Project(name=name)
            self._projects.append(project)
            self.save("projects")
        logger.info(f"📁 Added project: {project.name} ({project.id})")
        return project.id

    def rename_project(self, project_id: str, name: str) -> None:
        with self._lock:
            project = self._find(self._projects, project_id)
            if project:
                project.name = name
            self.save("projects")

    def delete_project(self, project_id: str) -> None:
        with self._lock:
            self._collections["projects"] = self._without(self._projects, project_id)
            self.save("projects")

    def add_project_task(
        self,
        project_id: str,
        content: str,
        column: Column = Column.TODO
    ) -> Optional[str]:
        """Append a card; returns its id, or None for an unknown project"""
        task_id = None
        with self._lock:
            project = self._find(self._projects, project_id)
            if project:
                task_id = kanban.add_task(project, content, Column(column)).id
            else:
                self._not_found("project", project_id)
            self.save("projects")
        return task_id

    def move_project_task(self, project_id: str, task_id: str, to_column: Column) -> None:
        with self._lock:
            project = self._find(self._projects, project_id)
            if project and kanban.move_task(project, task_id, Column(to_column)):
                logger.info(f"🔀 Moved card {task_id} → {Column(to_column).value}")
            self.save("projects")

    def update_project_task(self, project_id: str, task_id: str, content: str) -> None:
        with self._lock:
            project = self._find(self._projects, project_id)
            if project:
                kanban.update_content(project, task_id, content)
            self.save("projects")

    def delete_project_task(self, project_id: str, task_id: str) -> None:
        with self._lock:
            project = self._find(self._projects, project_id)
            if project:
                kanban.remove_task(project, task_id)
            self.save("projects")

    def project_column(self, project_id: str, column: Column) -> List[ProjectTask]:
        with self._lock:
            project = self._find(self._projects, project_id)
            if not project:
                return []
            return [task.model_copy(deep=True) for task in kanban.column_tasks(project, column)]

    # ========================================
    # HABIT OPERATIONS
    # ========================================

    @property
    def _habits(self) -> List[Habit]:
        return self._collections["habits"]

    def habits(self) -> List[Habit]:
        with self._lock:
            return [habit.model_copy(deep=True) for habit in self._habits]

    def add_habit(self, name: str) -> str:
        with self._lock:
            habit = Habit(name=name)
            self._habits.append(habit)
            self.save("habits")
        logger.info(f"🌱 Added habit: {habit.name} ({habit.id})")
        return habit.id

    def rename_habit(self, habit_id: str, name: str) -> None:
        with self._lock:
            habit = self._find(self._habits, habit_id)
            if habit:
                habit.name = name
            self.save("habits")

    def delete_habit(self, habit_id: str) -> None:
        with self._lock:
            self._collections["habits"] = self._without(self._habits, habit_id)
            self.save("habits")

    def toggle_habit(self, habit_id: str, day: Union[date, datetime, None] = None) -> None:
        """Mark a day done, or undo it if already done"""
        key = day_key(day if day is not None else local_now())
        with self._lock:
            habit = self._find(self._habits, habit_id)
            if habit:
                if key in habit.records:
                    habit.records.discard(key)
                else:
                    habit.records.add(key)
            self.save("habits")

    # ========================================
    # NOTE OPERATIONS
    # ========================================

    @property
    def _notes(self) -> List[Note]:
        return self._collections["notes"]

    def notes(self) -> List[Note]:
        """Newest first"""
        with self._lock:
            return [note.model_copy(deep=True) for note in self._notes]

    def add_note(
        self,
        title: str,
        content: str = "",
        tag: str = "",
        color_name: str = "blue"
    ) -> str:
        with self._lock:
            note = Note(title=title, content=content, tag=tag, color_name=color_name)
            self._notes.insert(0, note)
            self.save("notes")
        logger.info(f"📝 Added note: {note.title} ({note.id})")
        return note.id

    def update_note(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tag: Optional[str] = None,
        color_name: Optional[str] = None
    ) -> None:
        with self._lock:
            note = self._find(self._notes, note_id)
            if note:
                self._apply(note, title=title, content=content, tag=tag, color_name=color_name)
            self.save("notes")

    def delete_note(self, note_id: str) -> None:
        with self._lock:
            self._collections["notes"] = self._without(self._notes, note_id)
            self.save("notes")

    # ========================================
    # MIND-MAP OPERATIONS
    # ========================================

    @property
    def _mind_maps(self) -> List[MindMap]:
        return self._collections["mindmaps"]

    def mind_maps(self) -> List[MindMap]:
        with self._lock:
            return [mind_map.model_copy(deep=True) for mind_map in self._mind_maps]

    def get_mind_map(self, map_id: str) -> Optional[MindMap]:
        with self._lock:
            mind_map = self._find(self._mind_maps, map_id)
            return mind_map.model_copy(deep=True) if mind_map else None

    def add_mind_map(self, name: str) -> str:
        """New map with a single root node named after it"""
        root = MindMapNode(
            title=name,
            status=NodeStatus.IDEA,
            position=Point(x=self.config.mindmap_root_x, y=self.config.mindmap_root_y),
        )
        with self._lock:
            mind_map = MindMap(name=name, nodes=[root])
            self._mind_maps.append(mind_map)
            self.save("mindmaps")
        logger.info(f"🧠 Added mind-map: {mind_map.name} ({mind_map.id})")
        return mind_map.id

    def rename_mind_map(self, map_id: str, name: str) -> None:
        with self._lock:
            mind_map = self._find(self._mind_maps, map_id)
            if mind_map:
                mind_map.name = name
            self.save("mindmaps")

    def delete_mind_map(self, map_id: str) -> None:
        with self._lock:
            self._collections["mindmaps"] = self._without(self._mind_maps, map_id)
            self.save("mindmaps")

    def add_mind_map_node(
        self,
        map_id: str,
        title: str,
        position: PositionLike = (0.0, 0.0),
        parent_id: Optional[str] = None
    ) -> Optional[str]:
        """
        Add a node under parent_id (None = new root).

        Returns the node id, or None when the map or the parent is unknown.
        """
        node_id = None
        with self._lock:
            mind_map = self._find(self._mind_maps, map_id)
            if mind_map is None:
                self._not_found("mind-map", map_id)
            elif parent_id is not None and mind_map.find_node(parent_id) is None:
                self._not_found("mind-map node", parent_id)
            else:
                node = MindMapNode(title=title, position=position, parent_id=parent_id)
                mind_map.nodes.append(node)
                node_id = node.id
            self.save("mindmaps")
        return node_id

    def update_mind_map_node(
        self,
        map_id: str,
        node_id: str,
        title: Optional[str] = None,
        status: Optional[NodeStatus] = None,
        position: Optional[PositionLike] = None
    ) -> None:
        with self._lock:
            mind_map = self._find(self._mind_maps, map_id)
            node = mind_map.find_node(node_id) if mind_map else None
            if node:
                self._apply(node, title=title, status=status, position=position)
            self.save("mindmaps")

    def delete_mind_map_node(self, map_id: str, node_id: str) -> None:
        """Remove a node together with its whole subtree"""
        with self._lock:
            mind_map = self._find(self._mind_maps, map_id)
            if mind_map:
                before = len(mind_map.nodes)
                mind_map.nodes = tree.cascade_delete(mind_map.nodes, node_id)
                removed = before - len(mind_map.nodes)
                if removed:
                    logger.info(f"🗑️ Removed {removed} node(s) from {mind_map.name}")
            self.save("mindmaps")

    # ========================================
    # DERIVED VIEWS
    # ========================================

    def timeline(self, now: Optional[datetime] = None) -> Timeline:
        return build_timeline(self.tasks(), now)

    def upcoming_deadlines(
        self,
        now: Optional[datetime] = None,
        limit: Optional[int] = None
    ) -> List[Task]:
        return upcoming_deadlines(self.tasks(), now, limit)

    def get_status_report(self, now: Optional[datetime] = None) -> str:
        """Generate human-readable overview of every collection"""
        now = now or local_now()
        tasks = self.tasks()
        done = sum(1 for task in tasks if task.completed)
        today = day_key(now)

        lines = [
            "📋 OmniDo",
            f"Tasks: {done}/{len(tasks)} done, "
            f"{len(self.upcoming_deadlines(now))} upcoming",
            "",
            "Projects:",
        ]

        for project in self.projects():
            pct = kanban.progress_pct(project)
            counts = kanban.column_counts(project)
            lines.append(
                f"  {'█' * (pct // 10)}{'░' * (10 - pct // 10)} {pct:3d}%  {project.name} "
                f"({counts[Column.TODO]}/{counts[Column.DOING]}/{counts[Column.DONE]})"
            )

        lines.extend(["", "Habits:"])
        for habit in self.habits():
            icon = "✅" if today in habit.records else "⬜"
            lines.append(f"  {icon} {habit.name} ({len(habit.records)} days)")

        mind_maps = self.mind_maps()
        lines.extend([
            "",
            f"Notes: {len(self.notes())}",
            f"Mind-maps: {len(mind_maps)} "
            f"({sum(len(m.nodes) for m in mind_maps)} nodes)",
        ])
        return "\n".join(lines)

    # ========================================
    # HELPER METHODS
    # ========================================

    @staticmethod
    def _find(items: List[Any], item_id: str) -> Optional[Any]:
        for item in items:
            if item.id == item_id:
                return item
        return None

    def _without(self, items: List[Any], item_id: str) -> List[Any]:
        kept = [item for item in items if item.id != item_id]
        if len(kept) == len(items):
            self._not_found("entity", item_id)
        return kept

    @staticmethod
    def _apply(entity: Any, **fields: Any) -> None:
        """Set only the fields that were actually provided"""
        for name, value in fields.items():
            if value is not None:
                setattr(entity, name, value)

    @staticmethod
    def _not_found(kind: str, item_id: str) -> None:
        logger.debug(f"No {kind} with id {item_id}; nothing to do")
