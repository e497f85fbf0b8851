"""CLI commands for the credit portal.

Commands:
- init-db: Create the database schema
- import-subjects: Seed the subject catalog from YAML
- subjects: List the catalog
- progress: Show a student's per-semester progress
- report: Export a student's PDF report
- serve: Run the Web API
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from credit_portal.config.app_config import load_app_config
from credit_portal.core.errors import CreditPortalError, NotFoundError
from credit_portal.core.progress import summarize
from credit_portal.db.catalog import DEFAULT_CATALOG, CatalogError, import_subjects
from credit_portal.db.repository import SqliteStore
from credit_portal.report.pdf_report import display_percent, render_report, report_filename

app = typer.Typer(
    name="credits",
    help="Semester progress and credit tracking portal.",
    no_args_is_help=True,
)

console = Console()


def _open_store(db: Optional[Path]) -> SqliteStore:
    config = load_app_config()
    return SqliteStore.open(db or config.database.path)


def _fail(message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(code=1)


@app.command("init-db")
def init_db_command(
    db: Optional[Path] = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Create the database schema (idempotent)."""
    store = _open_store(db)
    console.print(f"[green]✓ Database ready:[/green] {store.db_path}")


@app.command("import-subjects")
def import_subjects_command(
    catalog: Path = typer.Argument(DEFAULT_CATALOG, help="Catalog YAML file"),
    db: Optional[Path] = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Seed (or update) the subject catalog from a YAML file."""
    store = _open_store(db)
    try:
        stored = import_subjects(store, catalog)
    except (FileNotFoundError, CatalogError, CreditPortalError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Imported {len(stored)} subjects[/green] from {catalog}")


@app.command("subjects")
def subjects_command(
    semester: Optional[int] = typer.Option(None, "--semester", "-s", help="Only this semester"),
    db: Optional[Path] = typer.Option(None, "--db", help="Database file"),
) -> None:
    """List the subject catalog."""
    store = _open_store(db)
    subjects = store.fetch_subjects()
    if semester is not None:
        subjects = [s for s in subjects if s.semester == semester]

    if not subjects:
        console.print("[yellow]No subjects in the catalog.[/yellow]")
        return

    table = Table(title="Subjects")
    table.add_column("ID", justify="right")
    table.add_column("Sem", justify="right")
    table.add_column("Code")
    table.add_column("Subject")
    table.add_column("Mode")
    table.add_column("Credits", justify="right")
    for s in subjects:
        table.add_row(
            str(s.subject_id), str(s.semester), s.code, s.name, s.mode_of_study, str(s.credits)
        )
    console.print(table)


@app.command("progress")
def progress_command(
    roll_no: str = typer.Argument(..., help="Student roll number"),
    db: Optional[Path] = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Show a student's per-semester progress and total credits."""
    config = load_app_config()
    store = _open_store(db)

    student = store.fetch_student(roll_no)
    if student is None:
        _fail(str(NotFoundError("student", roll_no)))

    summary = summarize(
        student,
        store.fetch_subjects(),
        store.fetch_completion_records(roll_no),
        credit_target=config.portal.credit_target,
    )

    console.print(f"[dim]{config.portal.college_name}[/dim]")
    console.print(f"[bold]{student.name}[/bold] ({roll_no}) - {student.department}, {student.year_of_study} year")
    console.print(f"Total Credits: {summary.total_credits} / {summary.credit_target}\n")

    table = Table()
    table.add_column("Semester", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Subjects", justify="right")
    table.add_column("Credits", justify="right")
    table.add_column("Status")
    for figures in summary.semesters:
        if not figures.accessible:
            state = "[dim]not accessible[/dim]"
        elif figures.locked:
            state = "[green]saved[/green]"
        else:
            state = "editable"
        table.add_row(
            str(figures.semester),
            f"{display_percent(figures.progress)}%",
            f"{figures.completed_count}/{figures.subject_count}",
            str(figures.credits_earned),
            state,
        )
    console.print(table)


@app.command("report")
def report_command(
    roll_no: str = typer.Argument(..., help="Student roll number"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="PDF output path"),
    db: Optional[Path] = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Export a student's performance report as PDF."""
    config = load_app_config()
    store = _open_store(db)

    student = store.fetch_student(roll_no)
    if student is None:
        _fail(str(NotFoundError("student", roll_no)))

    pdf = render_report(
        student,
        store.fetch_subjects(),
        store.fetch_completion_records(roll_no),
        credit_target=config.portal.credit_target,
        college_name=config.portal.college_name,
    )

    path = output or Path(report_filename(student))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(pdf)
    console.print(f"[green]✓ Report written:[/green] {path}")


@app.command("serve")
def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "credit_portal.web.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
