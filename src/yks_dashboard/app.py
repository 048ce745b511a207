"""Interactive CLI application."""
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from urllib.parse import urlparse

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from yks_dashboard.config import get_config
from yks_dashboard.dashboard import (
    format_local_date, latest_notes, relative_time_label, task_list_from_calendar,
    truncate_note, weekly_activity_summary,
)
from yks_dashboard.errors import DashboardError, ValidationError
from yks_dashboard.logging_config import init_cli_logging
from yks_dashboard.models import (
    Difficulty, ExamResult, ExamType, Goal, Mood, Priority, QuestionLog, Task,
    TaskCategory, parse_records,
)
from yks_dashboard.remote import RemoteStore

console = Console()

PRIORITY_COLORS = {Priority.HIGH: "red", Priority.MEDIUM: "yellow", Priority.LOW: "green"}
FLASHCARD_SESSION_SIZE = 10


def show_welcome():
    console.print(Panel(
        "[bold]YKS Study Dashboard[/bold]\n[dim]Tasks, notes, question logs and flashcards[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("dashboard", "Today's tasks, latest notes, weekly activity"),
        ("tasks", "All tasks"),
        ("add-task", "Create a task"),
        ("toggle", "Mark one of today's tasks done / not done"),
        ("note", "Record a mood and note"),
        ("goals", "Goal progress"),
        ("log", "Log solved questions"),
        ("exam", "Record a practice exam"),
        ("flashcards", "Review due flashcards"),
        ("topics", "Weak topics and subject stats"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def _trend_text(value: float) -> str:
    if value > 0:
        return f"[green]▲ {value:.0f}%[/green]"
    if value < 0:
        return f"[red]▼ {abs(value):.0f}%[/red]"
    return "[dim]0%[/dim]"


def _task_line(task: Task) -> str:
    mark = "[green]✔[/green]" if task.completed else "[dim]○[/dim]"
    color = PRIORITY_COLORS[task.priority]
    return f"{mark} {task.title} [{color}]({task.priority.value})[/{color}]"


def cmd_dashboard(store: RemoteStore, today: date | None = None, now: datetime | None = None):
    today = today or date.today()
    day = format_local_date(today)
    keys = [f"calendar/{day}", "moods", "question-logs", "tasks", "exam-results"]
    with ThreadPoolExecutor(max_workers=len(keys)) as pool:
        futures = {key: pool.submit(store.fetch, key) for key in keys}
        data = {key: future.result() for key, future in futures.items()}

    todays = task_list_from_calendar(data[f"calendar/{day}"])
    lines = [_task_line(t) for t in todays.tasks] or ["[dim]Nothing scheduled for today.[/dim]"]
    console.print(Panel(
        "\n".join(lines),
        title=f"Today's Tasks ({todays.completed_count}/{todays.total_count})",
        border_style="blue",
    ))

    notes = latest_notes(parse_records(Mood, data["moods"]))
    if notes:
        table = Table(title="Latest Notes")
        table.add_column("Mood")
        table.add_column("Note")
        table.add_column("When", style="dim")
        for mood in notes:
            table.add_row(mood.mood, truncate_note(mood.note.strip()), relative_time_label(mood.created_at, now))
        console.print(table)
    else:
        console.print("[dim]No notes yet. Use 'note' to add one.[/dim]")

    weekly = weekly_activity_summary(
        parse_records(QuestionLog, data["question-logs"]),
        parse_records(Task, data["tasks"]),
        parse_records(ExamResult, data["exam-results"]),
        today,
    )
    table = Table(title="This Week")
    table.add_column("Activity", style="cyan")
    table.add_column("Last 7 days", justify="right")
    table.add_column("Week before", justify="right")
    table.add_column("Trend", justify="right")
    for metric in weekly.metrics:
        table.add_row(metric.label, str(metric.value), str(metric.previous), _trend_text(metric.trend))
    console.print(table)
    console.print(f"\n  Total activity: [bold]{weekly.total_activity}[/bold]  |  "
                  f"Average trend: {_trend_text(weekly.average_trend)}")


def cmd_tasks(store: RemoteStore):
    tasks = store.fetch_records("tasks", Task)
    if not tasks:
        console.print("[yellow]No tasks yet. Use 'add-task' to create one.[/yellow]")
        return
    table = Table(title="Tasks")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Category", style="cyan")
    table.add_column("Due")
    table.add_column("Status")
    for i, task in enumerate(tasks, 1):
        color = PRIORITY_COLORS[task.priority]
        table.add_row(
            str(i),
            f"[{color}]{task.title}[/{color}]",
            task.category.value,
            (task.due_date or "")[:10],
            "[green]Done[/green]" if task.completed else "",
        )
    console.print(table)


def cmd_add_task(store: RemoteStore):
    title = Prompt.ask("Title")
    priority = Prompt.ask("Priority", choices=[p.value for p in Priority], default=Priority.MEDIUM.value)
    category = Prompt.ask("Category", choices=[c.value for c in TaskCategory], default=TaskCategory.GENEL.value)
    due = Prompt.ask("Due date (YYYY-MM-DD, empty for none)", default="")
    payload = {"title": title, "priority": priority, "category": category}
    if due.strip():
        payload["dueDate"] = due.strip()
    task = store.mutate("create_task", payload)
    console.print(f"[green]Added task: {task['title']}[/green]")


def cmd_toggle(store: RemoteStore, today: date | None = None):
    day = format_local_date(today or date.today())
    todays = task_list_from_calendar(store.fetch(f"calendar/{day}"))
    if not todays.tasks:
        console.print("[yellow]No tasks scheduled for today.[/yellow]")
        return
    for i, task in enumerate(todays.tasks, 1):
        console.print(f"  [cyan]{i}[/cyan]) {_task_line(task)}")
    choice = IntPrompt.ask("Task", choices=[str(i) for i in range(1, len(todays.tasks) + 1)])
    task = todays.tasks[choice - 1]
    updated = store.mutate("toggle_task", id=task.id)
    state = "done" if updated["completed"] else "not done"
    console.print(f"[green]{task.title} marked {state}.[/green]")


def cmd_note(store: RemoteStore):
    mood = Prompt.ask("Mood (emoji or a word)")
    note = Prompt.ask("Note", default="")
    payload = {"mood": mood}
    if note.strip():
        payload["note"] = note
    store.mutate("create_mood", payload)
    console.print("[green]Saved.[/green]")


def cmd_goals(store: RemoteStore):
    goals = store.fetch_records("goals", Goal)
    if not goals:
        console.print("[yellow]No goals yet.[/yellow]")
        return
    table = Table(title="Goals")
    table.add_column("Goal", style="cyan")
    table.add_column("Current", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Timeframe")
    table.add_column("Target date")
    for goal in goals:
        table.add_row(
            goal.title,
            f"{goal.current_value} {goal.unit}",
            f"{goal.target_value} {goal.unit}",
            goal.timeframe.value,
            goal.target_date or "",
        )
    console.print(table)


def cmd_log(store: RemoteStore):
    exam_type = Prompt.ask("Exam", choices=[e.value for e in ExamType], default=ExamType.TYT.value)
    subject = Prompt.ask("Subject")
    topic = Prompt.ask("Topic (optional)", default="")
    correct = IntPrompt.ask("Correct", default=0)
    wrong = IntPrompt.ask("Wrong", default=0)
    blank = IntPrompt.ask("Blank", default=0)
    wrong_topics = Prompt.ask("Topics you got wrong (comma separated)", default="")
    minutes = IntPrompt.ask("Minutes spent", default=0)
    study_date = Prompt.ask("Study date", default=format_local_date(date.today()))
    payload = {
        "exam_type": exam_type,
        "subject": subject,
        "correct_count": str(correct),
        "wrong_count": str(wrong),
        "blank_count": str(blank),
        "wrong_topics": [t.strip() for t in wrong_topics.split(",") if t.strip()],
        "study_date": study_date,
    }
    if topic.strip():
        payload["topic"] = topic.strip()
    if minutes:
        payload["time_spent_minutes"] = minutes
    store.mutate("create_question_log", payload)
    console.print(f"[green]Logged {correct + wrong + blank} {subject} questions.[/green]")


def cmd_exam(store: RemoteStore):
    payload = {
        "exam_name": Prompt.ask("Exam name"),
        "exam_date": Prompt.ask("Exam date", default=format_local_date(date.today())),
        "tyt_net": Prompt.ask("TYT net", default="0"),
        "ayt_net": Prompt.ask("AYT net", default="0"),
    }
    ranking = Prompt.ask("Ranking (optional)", default="")
    if ranking.strip():
        payload["ranking"] = ranking.strip()
    store.mutate("create_exam_result", payload)
    console.print(f"[green]Saved {payload['exam_name']}.[/green]")


def cmd_flashcards(store: RemoteStore):
    cards = store.fetch("flashcards/due")[:FLASHCARD_SESSION_SIZE]
    if not cards:
        console.print("[yellow]No flashcards due right now![/yellow]")
        return
    console.print(f"\n[bold]Flashcard Session[/bold] ({len(cards)} cards)\n")
    for i, card in enumerate(cards, 1):
        title = f"Card {i}/{len(cards)} · {card['examType']} {card['subject']}"
        console.print(Panel(card["question"], title=title, border_style="cyan"))
        answer = Prompt.ask("[dim]Your answer (Enter to reveal)[/dim]", default="")
        console.print(Panel(card["answer"], border_style="green"))
        is_correct = Confirm.ask("Did you get it right?", default=True)
        difficulty = Prompt.ask(
            "How hard was it", choices=[d.value for d in Difficulty], default=Difficulty.MEDIUM.value,
        )
        store.mutate(
            "review_flashcard",
            {"difficulty": difficulty, "isCorrect": is_correct, "userAnswer": answer},
            id=card["id"],
        )
        console.print()


def cmd_topics(store: RemoteStore):
    topics = store.fetch("topics/priority")
    if topics:
        table = Table(title="Topics to Revisit")
        table.add_column("Topic")
        table.add_column("Wrong", justify="right")
        table.add_column("Frequency", justify="right")
        table.add_column("Priority")
        for t in topics:
            table.add_row(
                t["topic"],
                str(t["wrong_mentions"]),
                f"{t['mention_frequency']:.0f}%",
                f"[{t['color']}]{t['priority']}[/{t['color']}]",
            )
        console.print(table)
    else:
        console.print("[green]No recurring weak topics yet.[/green]")

    subjects = store.fetch("subjects/stats")
    if subjects:
        table = Table(title="Questions by Subject")
        table.add_column("Subject", style="cyan")
        table.add_column("Questions", justify="right")
        table.add_column("Minutes", justify="right")
        table.add_column("Min / question", justify="right")
        for s in subjects:
            table.add_row(
                s["subject"], str(s["total_questions"]), str(s["total_time_minutes"]),
                f"{s['average_time_per_question']:.1f}",
            )
        console.print(table)


COMMANDS = {
    "dashboard": cmd_dashboard,
    "tasks": cmd_tasks,
    "add-task": cmd_add_task,
    "toggle": cmd_toggle,
    "note": cmd_note,
    "goals": cmd_goals,
    "log": cmd_log,
    "exam": cmd_exam,
    "flashcards": cmd_flashcards,
    "topics": cmd_topics,
}

# writes each command sends; a command is held back while its write is pending
COMMAND_MUTATIONS = {
    "add-task": "create_task",
    "toggle": "toggle_task",
    "note": "create_mood",
    "log": "create_question_log",
    "exam": "create_exam_result",
    "flashcards": "review_flashcard",
}


def run_command(store: RemoteStore, choice: str) -> bool:
    """Run one menu command; returns False when the user asked to quit."""
    if choice in ("quit", "exit", "q"):
        console.print("[dim]Good luck on the exam![/dim]")
        return False
    command = COMMANDS.get(choice)
    if command is None:
        console.print("[red]Unknown command. Try again.[/red]")
        return True
    kind = COMMAND_MUTATIONS.get(choice)
    if kind is not None and store.is_mutating(kind):
        console.print(f"[yellow]Still saving the previous {choice}, try again in a moment.[/yellow]")
        return True
    try:
        command(store)
    except ValidationError as e:
        console.print("[red]Invalid input:[/red]")
        for error in e.errors:
            console.print(f"  [red]- {error}[/red]")
    except DashboardError as e:
        console.print(f"[red]Error: {e}[/red]")
    return True


def serve(config=None):
    from yks_dashboard.api import create_app

    config = config or get_config()
    url = urlparse(config.API_BASE_URL)
    create_app().run(host=url.hostname or "127.0.0.1", port=url.port or 5000)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config = get_config()
    if argv and argv[0] == "serve":
        serve(config)
        return

    init_cli_logging("WARNING")
    store = RemoteStore(config.API_BASE_URL, timeout=config.REQUEST_TIMEOUT)
    show_welcome()

    running = True
    while running:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard").strip().lower()
        try:
            running = run_command(store, choice)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")


if __name__ == "__main__":
    main()
