"""Main CLI application using Typer."""
import asyncio
import os
from datetime import datetime

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.table import Table

from ..chat import ChatSession
from ..config import DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT
from ..logger import setup_logging
from ..notifications import Notification, NotificationLevel
from ..tasks import BOARD_COLUMNS, Task, TaskBoard, TaskPriority, TaskStatus
from .providers import get_chat_backend, get_llm, get_task_store

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="flowboard",
    help="Kanban task board with a streaming AI assistant",
    no_args_is_help=True,
    add_completion=True,
)
tasks_app = typer.Typer(help="Manage tasks on the board", no_args_is_help=True)
app.add_typer(tasks_app, name="tasks")

# Console for rich output
console = Console()

_LEVEL_STYLES = {
    NotificationLevel.INFO: "cyan",
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.ERROR: "red",
}


def print_notification(notification: Notification) -> None:
    style = _LEVEL_STYLES[notification.level]
    line = f"[bold {style}]{notification.title}[/bold {style}]"
    if notification.description:
        line += f" [dim]{notification.description}[/dim]"
    console.print(line)


def _resolve_task(board: TaskBoard, ref: str) -> Task:
    """Find a task by full id or unique id prefix."""
    task = board.get_task(ref)
    if task is not None:
        return task
    matches = [task for task in board.tasks if task.id.startswith(ref)]
    if len(matches) != 1:
        reason = "No task" if not matches else "More than one task"
        console.print(f"[red]Error: {reason} matches id '{ref}'[/red]")
        raise typer.Exit(code=1)
    return matches[0]


def _render_board(tasks: list[Task]) -> Table:
    order = {status: index for index, status in enumerate(BOARD_COLUMNS)}
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim", width=8)
    table.add_column("Status", style="yellow", width=12)
    table.add_column("Title")
    table.add_column("Priority", width=8)
    table.add_column("Category", style="cyan")
    table.add_column("Due", width=10)

    for task in sorted(tasks, key=lambda t: (order.get(t.status, len(order)), t.position)):
        table.add_row(
            task.id[:8],
            task.status.value,
            task.title,
            task.priority.value,
            task.category or "",
            task.due_date.isoformat() if task.due_date else "",
        )
    return table


@app.callback()
def main(
    log_level: str = typer.Option(
        os.getenv("FLOWBOARD_LOG_LEVEL", "WARNING"),
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, or error"
    ),
    log_file: str | None = typer.Option(
        None,
        "--log-file",
        help="Also write debug logs to this file"
    ),
):
    """FlowBoard command-line interface."""
    setup_logging(level=log_level, log_file=log_file, console=console)


@app.command()
def serve(
    host: str = typer.Option(DEFAULT_SERVER_HOST, "--host", help="Interface to bind"),
    port: int = typer.Option(DEFAULT_SERVER_PORT, "--port", "-p", help="Port to listen on"),
):
    """Run the chat gateway the assistant talks to."""
    import uvicorn

    from ..server import create_app

    llm = get_llm(console)
    if llm is None:
        console.print("[yellow]Gateway will answer 500 until an LLM provider is configured[/yellow]")

    console.print(f"[dim]Serving chat gateway on http://{host}:{port}/chat[/dim]")
    uvicorn.run(create_app(llm), host=host, port=port)


@app.command()
def chat(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Chat endpoint (default: FLOWBOARD_CHAT_URL)"
    )
):
    """Interactive chat with the board assistant."""
    async def _chat():
        store = get_task_store()
        backend = get_chat_backend(url)
        live: Live | None = None

        def render(message) -> None:
            if live is not None:
                live.update(Markdown(message.content))

        try:
            await store.connect()
            board = TaskBoard(store, notify=print_notification)
            await board.refresh()

            session = ChatSession(backend, board, notify=print_notification, on_update=render)

            console.print("[bold cyan]FlowBoard Assistant[/bold cyan]")
            console.print(f"[dim]{len(board.tasks)} tasks loaded. "
                          "Type '/tasks' to show the board, 'exit' to leave[/dim]\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")

                    if not user_input.strip():
                        continue

                    if user_input.strip().lower() in ('exit', 'quit', 'q'):
                        console.print("[dim]Goodbye![/dim]")
                        break

                    if user_input.strip() == "/tasks":
                        console.print(_render_board(board.tasks))
                        continue

                    console.print("[bold green]Assistant:[/bold green]")
                    with Live(console=console, refresh_per_second=12) as live:
                        await session.submit(user_input)
                    live = None
                    console.print()

                except KeyboardInterrupt:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except EOFError:
                    console.print("\n[dim]Goodbye![/dim]")
                    break

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await backend.close()
            await store.disconnect()

    asyncio.run(_chat())


@tasks_app.command("list")
def list_tasks(
    search: str = typer.Option("", "--search", "-s", help="Filter by title or category"),
    priority: TaskPriority | None = typer.Option(None, "--priority", "-p", help="Filter by priority"),
):
    """Show the board."""
    async def _list():
        store = get_task_store()
        try:
            await store.connect()
            board = TaskBoard(store, notify=print_notification)
            await board.refresh()

            tasks = board.filter_tasks(search=search, priority=priority)
            if not tasks:
                console.print("[yellow]No tasks found[/yellow]")
                return
            console.print(_render_board(tasks))

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_list())


@tasks_app.command("add")
def add_task(
    title: str = typer.Argument(..., help="Task title"),
    description: str | None = typer.Option(None, "--description", "-d", help="Task description"),
    status: TaskStatus = typer.Option(TaskStatus.TODO, "--status", "-s", help="Initial status"),
    priority: TaskPriority = typer.Option(TaskPriority.MEDIUM, "--priority", "-p", help="Priority"),
    category: str | None = typer.Option(None, "--category", "-c", help="Category label"),
    due: datetime | None = typer.Option(None, "--due", formats=["%Y-%m-%d"], help="Due date"),
):
    """Create a task at the bottom of its column."""
    async def _add():
        store = get_task_store()
        try:
            await store.connect()
            board = TaskBoard(store, notify=print_notification)
            task = await board.add_task(
                title,
                description=description,
                status=status,
                priority=priority,
                category=category,
                due_date=due.date() if due else None,
            )
            if task is None:
                raise typer.Exit(code=1)
            console.print(f"[green]Added task {task.id[:8]}: {task.title}[/green]")
        finally:
            await store.disconnect()

    asyncio.run(_add())


@tasks_app.command("move")
def move_task(
    task_id: str = typer.Argument(..., help="Task id or unique id prefix"),
    status: TaskStatus = typer.Argument(..., help="Target column"),
):
    """Move a task to another column."""
    async def _move():
        store = get_task_store()
        try:
            await store.connect()
            board = TaskBoard(store, notify=print_notification)
            await board.refresh()
            task = _resolve_task(board, task_id)

            moved = await board.move_task(task.id, status)
            if moved is None:
                console.print(f"[dim]'{task.title}' was not moved[/dim]")
                return
            console.print(f"[green]Moved '{moved.title}' to {moved.status.value}[/green]")
        finally:
            await store.disconnect()

    asyncio.run(_move())


@tasks_app.command("delete")
def delete_task(
    task_id: str = typer.Argument(..., help="Task id or unique id prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
):
    """Delete a task."""
    async def _delete():
        store = get_task_store()
        try:
            await store.connect()
            board = TaskBoard(store, notify=print_notification)
            await board.refresh()
            task = _resolve_task(board, task_id)

            if not yes and not typer.confirm(f"Delete '{task.title}'?"):
                console.print("[dim]Aborted.[/dim]")
                return
            if not await board.delete_task(task.id):
                raise typer.Exit(code=1)
            console.print(f"[green]Deleted '{task.title}'[/green]")
        finally:
            await store.disconnect()

    asyncio.run(_delete())


if __name__ == "__main__":
    app()
