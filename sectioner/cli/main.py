from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, NoReturn

import typer

from ..data.loader import load_override, load_roster
from ..data.store import RosterStore
from ..errors import CommitError, InputValidationError, NotFoundError, SectionerError
from ..models.override import OverrideEntry
from ..render.csv_out import csv_sections, write_csv_sections
from ..render.payload import preview_payload
from ..scheduler import distribute
from ..service import distribute_class, import_section, link
from ..settings import EngineSettings, load_settings
from ..validate.checks import validate_partition
from ..validate.report import format_validation_report, write_validation_report


def _setup_logging(project_root: Path, settings: EngineSettings) -> None:
    logs_dir = project_root / settings.log_dir
    logs_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(logs_dir / "sectioner.log", encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )


def _apply_overrides(
    settings: EngineSettings,
    rounds: int | None,
    count_iterations: int | None,
    gender_iterations: int | None,
    gender_tolerance: float | None,
) -> EngineSettings:
    changes = {
        "rebalance_rounds": rounds,
        "count_iterations": count_iterations,
        "gender_iterations": gender_iterations,
        "gender_tolerance": gender_tolerance,
    }
    return replace(settings, **{k: v for k, v in changes.items() if v is not None})


def run_pipeline(
    project_root: Path,
    roster_path: Path,
    sections: int,
    *,
    override_path: Path | None = None,
    origin_section: int = 1,
    log_level: int | None = None,
    rounds: int | None = None,
    count_iterations: int | None = None,
    gender_iterations: int | None = None,
    gender_tolerance: float | None = None,
) -> tuple[str, str, str]:
    """Distribute a roster file and write the results under ``outputs/``.

    Returns (sections csv, validation summary, audit text).
    """
    settings = _apply_overrides(
        load_settings(project_root), rounds, count_iterations, gender_iterations, gender_tolerance
    )
    _setup_logging(project_root, settings)
    if log_level is not None:
        logging.getLogger().setLevel(log_level)

    roster = load_roster(roster_path, section=origin_section, group_limit=settings.group_limit)
    override: List[OverrideEntry] | None = None
    if override_path is not None:
        override = load_override(override_path)
    result = distribute(roster, sections, override=override, settings=settings)

    # Override placements bypass the gate, so every student is excused there
    exempt = {s.id for s in roster} if override is not None else result.relaxed_ids
    report = validate_partition(roster, result.partition, exempt)
    report["relaxations"] = [
        {"student": r.student_id, "name": r.student_name, "stage": r.stage,
         "section": r.section, "rule": r.rule}
        for r in result.relaxations
    ]

    outputs_dir = project_root / settings.outputs_dir
    write_validation_report(report, outputs_dir)
    csv = csv_sections(result.partition)
    write_csv_sections(csv, outputs_dir)
    with (outputs_dir / "stats.json").open("w", encoding="utf-8") as f:
        json.dump(preview_payload(result.stats, result.partition), f, indent=2, ensure_ascii=False)

    audit_text = "\n".join(result.audit)
    with (outputs_dir / "audit.txt").open("w", encoding="utf-8") as f:
        f.write(audit_text)

    return csv, format_validation_report(report), audit_text


app = typer.Typer(add_completion=False, help="Student section distribution")

EXIT_CODES = {InputValidationError: 2, NotFoundError: 4, CommitError: 1}


def _fail(exc: SectionerError) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=EXIT_CODES.get(type(exc), 1))


def _store(db: Path) -> RosterStore:
    store = RosterStore(db)
    store.init_schema()
    return store


@app.command("run")
def cli_run(
    roster: Path = typer.Argument(..., exists=True, help="Roster file (.json or pasted .tsv)"),
    sections: int = typer.Option(..., "--sections", "-n", help="Number of target sections"),
    override: Path | None = typer.Option(None, exists=True, help="Manual override JSON"),
    origin_section: int = typer.Option(1, help="Origin section for .tsv rosters"),
    root: Path = typer.Option(Path("."), help="Project root for configs/, logs/ and outputs/"),
    log_level: str = typer.Option("INFO", help="Log level"),
    rounds: int | None = typer.Option(None, help="Repair rounds (default 3)"),
    gender_tolerance: float | None = typer.Option(None, help="Gender ratio tolerance (default 0.15)"),
) -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)
    try:
        csv, validation, audit = run_pipeline(
            root,
            roster,
            sections,
            override_path=override,
            origin_section=origin_section,
            log_level=level,
            rounds=rounds,
            gender_tolerance=gender_tolerance,
        )
    except SectionerError as exc:
        _fail(exc)
    typer.echo(csv)
    typer.echo(validation)


@app.command("init-db")
def cli_init_db(db: Path = typer.Option(Path("sectioner.db"), help="SQLite database")) -> None:
    _store(db)
    typer.echo(f"initialised {db}")


@app.command("create-class")
def cli_create_class(
    grade: str = typer.Option(..., help="Grade label"),
    sections: int = typer.Option(..., help="Number of origin sections"),
    school_id: int | None = typer.Option(None, help="School id"),
    db: Path = typer.Option(Path("sectioner.db"), help="SQLite database"),
) -> None:
    class_id = _store(db).create_class(grade, sections, school_id)
    typer.echo(str(class_id))


@app.command("import")
def cli_import(
    paste: Path = typer.Argument(..., exists=True, help="Tab-separated roster text"),
    class_id: int = typer.Option(..., help="Class id"),
    section: int = typer.Option(1, help="Section number the rows belong to"),
    db: Path = typer.Option(Path("sectioner.db"), help="SQLite database"),
) -> None:
    try:
        count = import_section(_store(db), class_id, section, paste.read_text(encoding="utf-8"))
    except SectionerError as exc:
        _fail(exc)
    typer.echo(f"saved {count} students")


@app.command("distribute")
def cli_distribute(
    class_id: int = typer.Option(..., help="Class id"),
    sections: int = typer.Option(..., "--sections", "-n", help="Number of target sections"),
    preview: bool = typer.Option(True, "--preview/--commit", help="Preview only, or persist"),
    override: Path | None = typer.Option(None, exists=True, help="Manual override JSON"),
    school_id: int | None = typer.Option(None, help="School id"),
    db: Path = typer.Option(Path("sectioner.db"), help="SQLite database"),
) -> None:
    try:
        entries = load_override(override) if override is not None else None
        outcome = distribute_class(
            _store(db),
            class_id,
            sections,
            preview=preview,
            override=entries,
            school_id=school_id,
            settings=load_settings(),
        )
    except SectionerError as exc:
        _fail(exc)
    typer.echo(json.dumps(outcome.as_dict(), indent=2, ensure_ascii=False))


@app.command("link")
def cli_link(
    parent: int = typer.Option(..., help="Parent class id"),
    child: int = typer.Option(..., help="Child class id"),
    school_id: int | None = typer.Option(None, help="School id"),
    db: Path = typer.Option(Path("sectioner.db"), help="SQLite database"),
) -> None:
    try:
        link(_store(db), parent, child, school_id)
    except SectionerError as exc:
        _fail(exc)
    typer.echo(f"linked {parent} -> {child}")


if __name__ == "__main__":  # pragma: no cover
    app()
