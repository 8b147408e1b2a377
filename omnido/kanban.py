"""
Kanban board operations for a single Project.

Three fixed columns: todo -> doing -> done. A card's column is just a field;
column membership is a filter over the project's task list, so moving a card
never reorders the list.
"""
from typing import Dict, List, Optional

from .schema import Column, Project, ProjectTask


def find_task(project: Project, task_id: str) -> Optional[ProjectTask]:
    for task in project.tasks:
        if task.id == task_id:
            return task
    return None


def add_task(project: Project, content: str, column: Column = Column.TODO) -> ProjectTask:
    """Append a new card to the project in the given column."""
    task = ProjectTask(content=content, column=column)
    project.tasks.append(task)
    return task


def move_task(project: Project, task_id: str, to_column: Column) -> bool:
    """Rewrite only the card's column. Returns False if the card is unknown."""
    task = find_task(project, task_id)
    if task is None:
        return False
    task.column = to_column
    return True


def update_content(project: Project, task_id: str, content: str) -> bool:
    task = find_task(project, task_id)
    if task is None:
        return False
    task.content = content
    return True


def remove_task(project: Project, task_id: str) -> bool:
    before = len(project.tasks)
    project.tasks = [task for task in project.tasks if task.id != task_id]
    return len(project.tasks) != before


def column_tasks(project: Project, column: Column) -> List[ProjectTask]:
    """Cards in a column, in the order they appear in the project."""
    column = Column(column)
    return [task for task in project.tasks if task.column == column]


def column_counts(project: Project) -> Dict[Column, int]:
    counts = {column: 0 for column in Column}
    for task in project.tasks:
        counts[task.column] += 1
    return counts


def progress_pct(project: Project) -> int:
    if not project.tasks:
        return 0
    done = sum(1 for task in project.tasks if task.column == Column.DONE)
    return int((done / len(project.tasks)) * 100)
