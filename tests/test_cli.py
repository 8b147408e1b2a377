"""
Tests for the command-line interface.
"""
import json

import pytest

from omnido.cli import main


@pytest.fixture
def run(tmp_path, capsys, monkeypatch):
    """Run the CLI against an empty temp data dir and return (code, stdout)"""
    config = tmp_path / "config.yaml"
    config.write_text("seed_defaults: false\n")
    monkeypatch.setenv("OMNIDO_CONFIG", str(config))

    def _run(*argv):
        code = main(["--dir", str(tmp_path / "data"), *argv])
        return code, capsys.readouterr().out

    return _run


def _last_word(out):
    return out.strip().split()[-1]


def test_no_command_prints_help(run):
    code, out = run()
    assert code == 1
    assert "usage" in out.lower()


def test_task_commands(run):
    code, out = run("add-task", "Write report", "--due", "2099-01-01T09:00")
    assert code == 0
    task_id = _last_word(out)

    code, out = run("toggle-task", task_id)
    assert code == 0
    assert "Done" in out

    code, out = run("timeline", "--json")
    buckets = json.loads(out)
    assert buckets[0]["day"] == "2099-01-01"
    assert buckets[0]["tasks"][0]["completed"] is True

    assert run("delete-task", task_id)[0] == 0
    assert run("toggle-task", task_id)[0] == 1


def test_upcoming_lists_open_tasks(run):
    run("add-task", "Far away", "--due", "2099-06-01 12:00")
    code, out = run("upcoming")
    assert code == 0
    assert "Far away" in out


def test_upcoming_limit_zero(run):
    run("add-task", "Far away", "--due", "2099-06-01 12:00")
    code, out = run("upcoming", "-n", "0")
    assert code == 0
    assert "No upcoming deadlines" in out
    assert "Far away" not in out


def test_board_commands(run):
    project_id = _last_word(run("add-project", "Launch")[1])
    card_id = _last_word(run("add-card", project_id, "Ship it")[1])

    code, out = run("move-card", project_id, card_id, "done")
    assert code == 0

    code, out = run("board", project_id, "--json")
    project = json.loads(out)[0]
    assert project["tasks"] == [{"id": card_id, "content": "Ship it", "column": "done"}]

    assert run("add-card", "missing", "x")[0] == 1
    assert run("move-card", project_id, "missing", "todo")[0] == 1


def test_habit_commands(run):
    habit_id = _last_word(run("add-habit", "Run")[1])
    code, out = run("check-habit", habit_id, "--day", "2026-02-03")
    assert code == 0
    assert "✅" in out

    habits = json.loads(run("habits", "--json")[1])
    assert habits[0]["records"] == {"2026-02-03": True}


def test_note_commands(run):
    run("add-note", "First", "body", "--tag", "Dev")
    run("add-note", "Second", "--tag", "Life")
    notes = json.loads(run("notes", "--json")[1])
    assert [n["title"] for n in notes] == ["Second", "First"]

    dev = json.loads(run("notes", "--tag", "Dev", "--json")[1])
    assert [n["title"] for n in dev] == ["First"]


def test_mindmap_commands(run):
    map_id = _last_word(run("add-mindmap", "Plan")[1])
    mind_map = json.loads(run("mindmap", map_id, "--json")[1])[0]
    root_id = mind_map["nodes"][0]["id"]

    child_id = _last_word(run("add-node", map_id, "Child", "--parent", root_id)[1])
    run("add-node", map_id, "Grandchild", "--parent", child_id)
    assert run("add-node", map_id, "Stray", "--parent", "ghost")[0] == 1

    assert run("set-node-status", map_id, child_id, "blocked")[0] == 0

    code, out = run("mindmap", map_id)
    assert "[Blocked] Child" in out

    code, out = run("delete-node", map_id, child_id)
    assert code == 0
    assert "2 node(s)" in out


def test_unknown_ids_write_nothing(run, tmp_path):
    code, out = run("add-card", "missing", "x")
    assert code == 1
    assert "Project not found" in out

    code, out = run("add-node", "missing", "Stray")
    assert code == 1
    assert "Mind-map not found" in out

    data_dir = tmp_path / "data"
    assert not (data_dir / "projects.json").exists()
    assert not (data_dir / "mindmaps.json").exists()


def test_status(run):
    run("add-project", "Launch")
    code, out = run("status")
    assert code == 0
    assert "Launch" in out
