"""
OMNIDO - Entity Schema Definition
=================================
Tasks, kanban projects, habits, notes and mind-maps.
Every entity validates on construction and on assignment.
"""

from enum import Enum
from typing import Optional, List, Set, Dict, Any, Union
from datetime import date, datetime, timedelta
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_serializer,
    model_validator,
)
import uuid


def new_id() -> str:
    """Process-unique, never reused entity id"""
    return str(uuid.uuid4())


def local_now() -> datetime:
    return datetime.now().astimezone()


def day_key(value: Union[date, datetime]) -> str:
    """Canonical "YYYY-MM-DD" key of the local calendar day"""
    if isinstance(value, datetime):
        value = value.astimezone().date()
    return value.isoformat()


class Column(str, Enum):
    """Kanban workflow columns"""
    TODO = "todo"
    DOING = "doing"
    DONE = "done"

    @property
    def label(self) -> str:
        return COLUMN_TITLES[self]


COLUMN_TITLES = {
    Column.TODO: "To Do",
    Column.DOING: "In Progress",
    Column.DONE: "Done",
}

COLUMNS = list(Column)


class NodeStatus(str, Enum):
    """Mind-map node states"""
    IDEA = "idea"
    IN_PROGRESS = "progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"

    @property
    def label(self) -> str:
        return {
            NodeStatus.IDEA: "Idea",
            NodeStatus.IN_PROGRESS: "In Progress",
            NodeStatus.COMPLETED: "Completed",
            NodeStatus.BLOCKED: "Blocked",
        }[self]


class Entity(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=new_id)


class Task(Entity):
    """Standalone to-do with a deadline"""
    title: str
    deadline: datetime
    completed: bool = False

    @field_validator("deadline")
    @classmethod
    def _localize(cls, value: datetime) -> datetime:
        # naive values are read as local wall-clock time
        return value.astimezone()


class ProjectTask(Entity):
    """Kanban card; belongs to exactly one Project"""
    content: str
    column: Column = Column.TODO


class Project(Entity):
    name: str
    tasks: List[ProjectTask] = Field(default_factory=list)


class Habit(Entity):
    """Daily habit; a day-key in records means done that day"""
    name: str
    records: Set[str] = Field(default_factory=set)

    @field_validator("records", mode="before")
    @classmethod
    def _records_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {key for key, done in value.items() if done}
        return value

    @field_validator("records")
    @classmethod
    def _canonical_keys(cls, value: Set[str]) -> Set[str]:
        return {date.fromisoformat(key).isoformat() for key in value}

    @field_serializer("records")
    def _records_as_mapping(self, records: Set[str]) -> Dict[str, bool]:
        return {key: True for key in sorted(records)}

    def is_done(self, day: Union[date, datetime]) -> bool:
        return day_key(day) in self.records


class Note(Entity):
    """Inspiration note (markdown content), kept newest first"""
    title: str
    content: str = ""
    created_at: datetime = Field(default_factory=local_now)
    tag: str = ""
    color_name: str = "blue"


class Point(BaseModel):
    x: float = 0.0
    y: float = 0.0


class MindMapNode(Entity):
    title: str
    status: NodeStatus = NodeStatus.IDEA
    position: Point = Field(default_factory=Point)
    parent_id: Optional[str] = None  # None = root

    @field_validator("position", mode="before")
    @classmethod
    def _point_from_pair(cls, value: Any) -> Any:
        # Own the point; a caller's instance must not alias stored state
        if isinstance(value, Point):
            return value.model_copy()
        if isinstance(value, (tuple, list)):
            x, y = value
            return {"x": x, "y": y}
        return value

    @model_validator(mode="before")
    @classmethod
    def _unpack_position(cls, data: Any) -> Any:
        if isinstance(data, dict) and "position" not in data and (
            "position_x" in data or "position_y" in data
        ):
            data = dict(data)
            data["position"] = {
                "x": data.pop("position_x", 0.0),
                "y": data.pop("position_y", 0.0),
            }
        return data

    @model_serializer(mode="wrap")
    def _flatten_position(self, handler) -> Dict[str, Any]:
        # Stored as two numeric fields, not a nested object
        data = handler(self)
        position = data.pop("position")
        data["position_x"] = position["x"]
        data["position_y"] = position["y"]
        return data


class MindMap(Entity):
    name: str
    created_at: datetime = Field(default_factory=local_now)
    nodes: List[MindMapNode] = Field(default_factory=list)

    def find_node(self, node_id: str) -> Optional[MindMapNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


# Collection key -> entity type, as written by the persistence layer
COLLECTIONS: Dict[str, type] = {
    "tasks": Task,
    "projects": Project,
    "habits": Habit,
    "notes": Note,
    "mindmaps": MindMap,
}


# ============================================================
# SEED COLLECTIONS (first launch / unreadable data)
# ============================================================

def seed_collection(key: str, now: Optional[datetime] = None) -> List[Entity]:
    """Default contents installed when a collection cannot be loaded"""
    now = now or local_now()

    if key == "tasks":
        return [
            Task(title="Read The Design of Everyday Things", deadline=now + timedelta(days=1)),
            Task(title="Tidy up the desk", deadline=now + timedelta(hours=1), completed=True),
        ]
    if key == "projects":
        return [
            Project(name="App Design", tasks=[
                ProjectTask(content="Draw wireframes", column=Column.TODO),
                ProjectTask(content="Pick a colour palette", column=Column.DOING),
                ProjectTask(content="Competitor analysis", column=Column.DONE),
            ])
        ]
    if key == "habits":
        return [Habit(name="Meditate"), Habit(name="Read")]
    if key == "notes":
        return [
            Note(
                title="Minimal design principles",
                content="Design lives in **white space** and *breathing room*.",
                created_at=now,
                tag="Design",
                color_name="purple",
            ),
            Note(
                title="Storage",
                content="Try a real database instead of flat `json` files next time.",
                created_at=now - timedelta(days=1),
                tag="Dev",
                color_name="blue",
            ),
        ]
    if key == "mindmaps":
        return []
    raise KeyError(f"Unknown collection: {key}")
