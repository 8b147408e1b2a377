"""
Tests for the entity schema and the collection codec.
"""
import json
from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from omnido.schema import (
    Column, Habit, MindMap, MindMapNode, Note, NodeStatus, Point, Project,
    ProjectTask, Task, day_key, seed_collection, COLLECTIONS
)
from omnido.storage import decode_collection, encode_collection


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Model Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_ids_are_unique():
    ids = {Task(title="t", deadline=datetime.now()).id for _ in range(200)}
    assert len(ids) == 200


def test_naive_deadline_becomes_local_aware():
    task = Task(title="Write report", deadline=datetime(2026, 3, 1, 9, 30))
    assert task.deadline.tzinfo is not None
    assert task.deadline.hour == 9
    assert task.deadline.minute == 30


def test_deadline_assignment_is_localized():
    task = Task(title="t", deadline=datetime(2026, 3, 1, 9, 30))
    task.deadline = datetime(2026, 3, 2, 8, 0)
    assert task.deadline.tzinfo is not None


def test_project_task_rejects_unknown_column():
    with pytest.raises(ValidationError):
        ProjectTask(content="x", column="backlog")

    card = ProjectTask(content="x")
    with pytest.raises(ValidationError):
        card.column = "archived"
    assert card.column == Column.TODO


def test_column_labels():
    assert [c.label for c in Column] == ["To Do", "In Progress", "Done"]


def test_node_status_wire_values():
    assert NodeStatus.IN_PROGRESS.value == "progress"
    assert NodeStatus("blocked").label == "Blocked"


def test_day_key_ignores_time_of_day():
    morning = datetime(2026, 5, 4, 0, 1)
    night = datetime(2026, 5, 4, 23, 59)
    assert day_key(morning) == day_key(night) == "2026-05-04"
    assert day_key(date(2026, 5, 4)) == "2026-05-04"


def test_habit_records_accept_mapping_and_drop_false():
    habit = Habit(name="Read", records={"2026-01-01": True, "2026-01-02": False})
    assert habit.records == {"2026-01-01"}


def test_habit_records_serialize_as_mapping():
    habit = Habit(name="Read", records={"2026-01-02", "2026-01-01"})
    data = habit.model_dump(mode="json")
    assert data["records"] == {"2026-01-01": True, "2026-01-02": True}


def test_habit_rejects_bad_day_key():
    with pytest.raises(ValidationError):
        Habit(name="Read", records={"yesterday": True})


def test_node_position_is_two_fields():
    node = MindMapNode(title="root", position=(400, 300))
    data = node.model_dump(mode="json")
    assert "position" not in data
    assert data["position_x"] == 400.0
    assert data["position_y"] == 300.0
    assert data["parent_id"] is None


def test_node_decodes_flat_position():
    node = MindMapNode.model_validate(
        {"id": "n1", "title": "root", "status": "progress", "position_x": 1.5, "position_y": -2}
    )
    assert node.position == Point(x=1.5, y=-2.0)
    assert node.status == NodeStatus.IN_PROGRESS


def test_seed_collections():
    assert len(seed_collection("tasks")) == 2
    assert len(seed_collection("projects")[0].tasks) == 3
    assert [h.name for h in seed_collection("habits")] == ["Meditate", "Read"]
    notes = seed_collection("notes")
    assert notes[0].created_at > notes[1].created_at
    assert seed_collection("mindmaps") == []


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Codec Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _sample(key):
    now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
    if key == "tasks":
        return [
            Task(title="A", deadline=now, completed=True),
            Task(title="B", deadline=now + timedelta(days=2)),
        ]
    if key == "projects":
        return [Project(name="P", tasks=[
            ProjectTask(content="c1", column=Column.DOING),
            ProjectTask(content="c2", column=Column.DONE),
        ])]
    if key == "habits":
        return [Habit(name="H", records={"2026-05-30", "2026-05-31"}), Habit(name="Empty")]
    if key == "notes":
        return [Note(title="N", content="**bold**", created_at=now, tag="Dev", color_name="mint")]
    root = MindMapNode(title="root", position=(400, 300))
    child = MindMapNode(title="child", status=NodeStatus.BLOCKED, position=(10.25, 20), parent_id=root.id)
    return [MindMap(name="M", created_at=now, nodes=[root, child])]


@pytest.mark.parametrize("key", list(COLLECTIONS))
def test_collection_round_trip(key):
    items = _sample(key)
    assert decode_collection(key, encode_collection(key, items)) == items


@pytest.mark.parametrize("key", list(COLLECTIONS))
def test_empty_collection_round_trip(key):
    assert decode_collection(key, encode_collection(key, [])) == []


def test_encoded_collection_is_json_array():
    payload = json.loads(encode_collection("mindmaps", _sample("mindmaps")))
    assert isinstance(payload, list)
    assert set(payload[0]["nodes"][1]) == {"id", "title", "status", "position_x", "position_y", "parent_id"}


def test_decode_rejects_garbage():
    with pytest.raises(ValueError):
        decode_collection("tasks", b"{not json")
    with pytest.raises(ValueError):
        decode_collection("tasks", b'{"title": "not a list"}')
    with pytest.raises(ValueError):
        decode_collection("projects", b'[{"name": "P", "tasks": [{"content": "x", "column": "later"}]}]')
