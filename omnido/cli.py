#!/usr/bin/env python3
"""
OMNIDO - CLI Interface
======================
Command-line tool for the personal productivity store.

Usage:
    omnido status
    omnido add-task "Write report" --due "2026-01-28 17:00"
    omnido timeline
    omnido add-card <project_id> "Draw wireframes" --column doing
    omnido check-habit <habit_id> --day 2026-01-28
    omnido add-mindmap "Launch plan"
    omnido mindmap <map_id>
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime

from .config import Config
from .kanban import column_tasks
from .manager import EntityStore
from .schema import COLUMNS, Column, NodeStatus, local_now
from .timeline import deadline_status
from .tree import depth_first, orphans


def _parse_deadline(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date/time: {value} (use YYYY-MM-DD HH:MM)")


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid day: {value} (use YYYY-MM-DD)")


def _dump(items) -> str:
    return json.dumps([item.model_dump(mode="json") for item in items], indent=2, ensure_ascii=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omnido",
        description="OmniDo - tasks, kanban projects, habits, notes and mind-maps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  omnido status                               Overview of everything
  omnido add-task "Write report" --due 2026-01-28T17:00
  omnido timeline                             Tasks grouped by day
  omnido upcoming                             Next open deadlines
  omnido board <project_id>                   Kanban columns of a project
  omnido move-card <project_id> <card_id> done
  omnido check-habit <habit_id>               Toggle today's record
  omnido add-node <map_id> "Idea" --parent <node_id>
  omnido delete-node <map_id> <node_id>       Removes the whole subtree
        """
    )
    parser.add_argument("--dir", help="Data directory (overrides config)")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # STATUS
    subparsers.add_parser("status", help="Show overview of all collections")

    # TASKS
    add_task_parser = subparsers.add_parser("add-task", help="Add a task")
    add_task_parser.add_argument("title", help="Task title")
    add_task_parser.add_argument("--due", type=_parse_deadline, required=True, help="Deadline (ISO format)")

    toggle_parser = subparsers.add_parser("toggle-task", help="Toggle task completion")
    toggle_parser.add_argument("task_id", help="Task ID")

    delete_task_parser = subparsers.add_parser("delete-task", help="Delete a task")
    delete_task_parser.add_argument("task_id", help="Task ID")

    timeline_parser = subparsers.add_parser("timeline", help="Tasks grouped by day")
    timeline_parser.add_argument("--past", action="store_true", help="Include past days")
    timeline_parser.add_argument("--json", action="store_true", help="Output as JSON")

    upcoming_parser = subparsers.add_parser("upcoming", help="Next open deadlines")
    upcoming_parser.add_argument("-n", "--limit", type=int, help="Number of tasks")
    upcoming_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # PROJECTS
    add_project_parser = subparsers.add_parser("add-project", help="Add a kanban project")
    add_project_parser.add_argument("name", help="Project name")

    add_card_parser = subparsers.add_parser("add-card", help="Add a card to a project")
    add_card_parser.add_argument("project_id", help="Project ID")
    add_card_parser.add_argument("content", help="Card text")
    add_card_parser.add_argument("--column", choices=[c.value for c in Column], default="todo")

    move_card_parser = subparsers.add_parser("move-card", help="Move a card to another column")
    move_card_parser.add_argument("project_id", help="Project ID")
    move_card_parser.add_argument("card_id", help="Card ID")
    move_card_parser.add_argument("column", choices=[c.value for c in Column])

    delete_card_parser = subparsers.add_parser("delete-card", help="Remove a card")
    delete_card_parser.add_argument("project_id", help="Project ID")
    delete_card_parser.add_argument("card_id", help="Card ID")

    board_parser = subparsers.add_parser("board", help="Show a project's kanban board")
    board_parser.add_argument("project_id", nargs="?", help="Project ID (default: all)")
    board_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # HABITS
    add_habit_parser = subparsers.add_parser("add-habit", help="Add a habit")
    add_habit_parser.add_argument("name", help="Habit name")

    check_parser = subparsers.add_parser("check-habit", help="Toggle a habit for a day")
    check_parser.add_argument("habit_id", help="Habit ID")
    check_parser.add_argument("--day", type=_parse_day, help="Day (YYYY-MM-DD, default today)")

    habits_parser = subparsers.add_parser("habits", help="List habits")
    habits_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # NOTES
    add_note_parser = subparsers.add_parser("add-note", help="Add a note")
    add_note_parser.add_argument("title", help="Note title")
    add_note_parser.add_argument("content", nargs="?", default="", help="Markdown content")
    add_note_parser.add_argument("--tag", default="Idea", help="Tag")
    add_note_parser.add_argument("--color", default="blue", help="Colour name")

    delete_note_parser = subparsers.add_parser("delete-note", help="Delete a note")
    delete_note_parser.add_argument("note_id", help="Note ID")

    notes_parser = subparsers.add_parser("notes", help="List notes (newest first)")
    notes_parser.add_argument("--tag", help="Only notes with this tag")
    notes_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # MIND-MAPS
    add_map_parser = subparsers.add_parser("add-mindmap", help="Create a mind-map")
    add_map_parser.add_argument("name", help="Mind-map name")

    add_node_parser = subparsers.add_parser("add-node", help="Add a mind-map node")
    add_node_parser.add_argument("map_id", help="Mind-map ID")
    add_node_parser.add_argument("title", help="Node title")
    add_node_parser.add_argument("--parent", help="Parent node ID (default: new root)")
    add_node_parser.add_argument("-x", type=float, default=0.0, help="X position")
    add_node_parser.add_argument("-y", type=float, default=0.0, help="Y position")

    status_node_parser = subparsers.add_parser("set-node-status", help="Change a node's status")
    status_node_parser.add_argument("map_id", help="Mind-map ID")
    status_node_parser.add_argument("node_id", help="Node ID")
    status_node_parser.add_argument("status", choices=[s.value for s in NodeStatus])

    delete_node_parser = subparsers.add_parser("delete-node", help="Delete a node and its subtree")
    delete_node_parser.add_argument("map_id", help="Mind-map ID")
    delete_node_parser.add_argument("node_id", help="Node ID")

    mindmap_parser = subparsers.add_parser("mindmap", help="Show mind-maps")
    mindmap_parser.add_argument("map_id", nargs="?", help="Mind-map ID (default: list all)")
    mindmap_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = Config.load(args.config)
    if args.dir:
        config.data_dir = args.dir
        config.resolve_paths()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, str(config.log_level).upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize store
    store = EntityStore(config=config)
    now = local_now()

    # Execute command
    if args.command == "status":
        print(store.get_status_report(now))

    elif args.command == "add-task":
        task_id = store.add_task(args.title, args.due)
        print(f"✅ Added: {task_id}")

    elif args.command == "toggle-task":
        if not store.get_task(args.task_id):
            print(f"❌ Task not found: {args.task_id}")
            return 1
        store.toggle_task(args.task_id)
        task = store.get_task(args.task_id)
        print(f"{'✅ Done' if task.completed else '⬜ Reopened'}: {task.title}")

    elif args.command == "delete-task":
        if not store.get_task(args.task_id):
            print(f"❌ Task not found: {args.task_id}")
            return 1
        store.delete_task(args.task_id)
        print(f"🗑️ Deleted: {args.task_id}")

    elif args.command == "timeline":
        timeline = store.timeline(now)
        buckets = timeline.buckets if args.past else timeline.upcoming
        if args.json:
            print(json.dumps([
                {"day": b.day.isoformat(), "tasks": [t.model_dump(mode="json") for t in b.tasks]}
                for b in buckets
            ], indent=2, ensure_ascii=False))
            return 0

        if not args.past and timeline.past:
            print(f"({timeline.past_count} past task(s) hidden, use --past)")
        if not buckets:
            print("No tasks")
        for bucket in buckets:
            marker = " ← today" if bucket.day == timeline.today_date else ""
            print(f"{bucket.day.strftime('%a %d %b %Y')}{marker}")
            for task in bucket.tasks:
                icon = "✅" if task.completed else "⬜"
                print(f"  {icon} {task.deadline.strftime('%H:%M')} {task.title}  [{deadline_status(task, now)}]  ({task.id})")

    elif args.command == "upcoming":
        tasks = store.upcoming_deadlines(
            now, args.limit if args.limit is not None else config.upcoming_limit)
        if args.json:
            print(_dump(tasks))
        elif not tasks:
            print("No upcoming deadlines 🎉")
        else:
            print("⏰ Upcoming Deadlines:")
            for task in tasks:
                print(f"  {deadline_status(task, now):>12}  {task.title}")

    elif args.command == "add-project":
        print(f"📁 Added: {store.add_project(args.name)}")

    elif args.command == "add-card":
        if not store.get_project(args.project_id):
            print(f"❌ Project not found: {args.project_id}")
            return 1
        card_id = store.add_project_task(args.project_id, args.content, Column(args.column))
        print(f"✅ Added card: {card_id}")

    elif args.command in ("move-card", "delete-card"):
        project = store.get_project(args.project_id)
        if not project or not any(t.id == args.card_id for t in project.tasks):
            print(f"❌ Card not found: {args.card_id}")
            return 1
        if args.command == "move-card":
            store.move_project_task(args.project_id, args.card_id, Column(args.column))
            print(f"🔀 Moved to {Column(args.column).label}")
        else:
            store.delete_project_task(args.project_id, args.card_id)
            print(f"🗑️ Deleted card: {args.card_id}")

    elif args.command == "board":
        projects = store.projects()
        if args.project_id:
            projects = [p for p in projects if p.id == args.project_id]
            if not projects:
                print(f"❌ Project not found: {args.project_id}")
                return 1
        if args.json:
            print(_dump(projects))
            return 0
        for project in projects:
            print(f"📁 {project.name} ({project.id})")
            for column in COLUMNS:
                cards = column_tasks(project, column)
                print(f"  {column.label} ({len(cards)})")
                for card in cards:
                    print(f"    - {card.content}  ({card.id})")

    elif args.command == "add-habit":
        print(f"🌱 Added: {store.add_habit(args.name)}")

    elif args.command == "check-habit":
        if not any(h.id == args.habit_id for h in store.habits()):
            print(f"❌ Habit not found: {args.habit_id}")
            return 1
        day = args.day or now.date()
        store.toggle_habit(args.habit_id, day)
        habit = next(h for h in store.habits() if h.id == args.habit_id)
        print(f"{'✅' if habit.is_done(day) else '⬜'} {habit.name} on {day.isoformat()}")

    elif args.command == "habits":
        habits = store.habits()
        if args.json:
            print(_dump(habits))
            return 0
        for habit in habits:
            icon = "✅" if habit.is_done(now) else "⬜"
            print(f"  {icon} {habit.name} - {len(habit.records)} days  ({habit.id})")

    elif args.command == "add-note":
        note_id = store.add_note(args.title, args.content, tag=args.tag, color_name=args.color)
        print(f"📝 Added: {note_id}")

    elif args.command == "delete-note":
        if not any(n.id == args.note_id for n in store.notes()):
            print(f"❌ Note not found: {args.note_id}")
            return 1
        store.delete_note(args.note_id)
        print(f"🗑️ Deleted: {args.note_id}")

    elif args.command == "notes":
        notes = store.notes()
        if args.tag:
            notes = [n for n in notes if n.tag == args.tag]
        if args.json:
            print(_dump(notes))
            return 0
        for note in notes:
            print(f"[{note.tag}] {note.title}  ({note.created_at.strftime('%Y-%m-%d')}, {note.id})")
            if note.content:
                print(f"    {note.content}")

    elif args.command == "add-mindmap":
        print(f"🧠 Added: {store.add_mind_map(args.name)}")

    elif args.command == "add-node":
        mind_map = store.get_mind_map(args.map_id)
        if not mind_map:
            print(f"❌ Mind-map not found: {args.map_id}")
            return 1
        if args.parent and not mind_map.find_node(args.parent):
            print(f"❌ Parent node not found: {args.parent}")
            return 1
        node_id = store.add_mind_map_node(args.map_id, args.title, (args.x, args.y), args.parent)
        print(f"✅ Added node: {node_id}")

    elif args.command in ("set-node-status", "delete-node"):
        mind_map = store.get_mind_map(args.map_id)
        if not mind_map or not mind_map.find_node(args.node_id):
            print(f"❌ Node not found: {args.node_id}")
            return 1
        if args.command == "set-node-status":
            store.update_mind_map_node(args.map_id, args.node_id, status=NodeStatus(args.status))
            print(f"✅ {NodeStatus(args.status).label}")
        else:
            store.delete_mind_map_node(args.map_id, args.node_id)
            removed = len(mind_map.nodes) - len(store.get_mind_map(args.map_id).nodes)
            print(f"🗑️ Deleted {removed} node(s)")

    elif args.command == "mindmap":
        maps = store.mind_maps()
        if args.map_id:
            maps = [m for m in maps if m.id == args.map_id]
            if not maps:
                print(f"❌ Mind-map not found: {args.map_id}")
                return 1
        if args.json:
            print(_dump(maps))
            return 0
        if not maps:
            print("No mind-maps")
        for mind_map in maps:
            print(f"🧠 {mind_map.name} ({mind_map.id})")
            if not args.map_id:
                continue
            for depth, node in depth_first(mind_map.nodes):
                print(f"{'  ' * (depth + 1)}- [{node.status.label}] {node.title}  ({node.id})")
            for node in orphans(mind_map.nodes):
                print(f"  ? [{node.status.label}] {node.title}  (orphan, {node.id})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
