"""Kollegplan - Haupt-CLI.

Verwendung:
  kollegplan init                              Standard-Konfiguration anlegen
  kollegplan demo -o daten.yaml                Demo-Planungsdaten erzeugen
  kollegplan check daten.yaml                  Machbarkeits-Check
  kollegplan generate daten.yaml -o plan.json  Stundenplan erzeugen
  kollegplan show plan.json --class CSE-A      Klassenplan anzeigen
  kollegplan show plan.json --teacher "Dr. Rao"
  kollegplan swap plan.json daten.yaml --class CSE-A --from Mon:1 --to Tue:2
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

DEFAULT_DATA_FILE = Path("output/demo_data.yaml")
DEFAULT_RESULT_JSON = Path("output/timetable.json")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


def _load_data_or_abort(path: Path, config_path: Optional[Path] = None):
    """Lädt Planungsdaten (optional mit separater Engine-Config) oder bricht ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        data = mgr.load_planning_data(path)
        if config_path is not None:
            data = data.model_copy(update={"config": mgr.load(config_path)})
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red bold]Fehler:[/red bold] {e}")
        sys.exit(1)
    return data


def _load_result_or_abort(path: Path):
    from solver.scheduler import GenerationResult
    try:
        return GenerationResult.load_json(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red bold]Fehler:[/red bold] {e}")
        sys.exit(1)


def _grid_table(title: str, header: list[str], rows: list[list[str]]) -> Table:
    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    for label in header:
        table.add_column(label, justify="center")
    for row in rows:
        cells = []
        for value in row:
            if value in ("BREAK", "LUNCH", "Free"):
                cells.append(f"[dim]{value}[/dim]")
            elif value.endswith("(Lab)"):
                cells.append(f"[cyan]{value}[/cyan]")
            else:
                cells.append(value)
        table.add_row(*cells)
    return table


# ─── INIT ─────────────────────────────────────────────────────────────────────

@click.command("init")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None,
              help="Zielpfad (Standard: config/engine_config.yaml).")
@click.option("--force", is_flag=True, default=False, help="Vorhandene Datei überschreiben.")
def cmd_init(output: Optional[Path], force: bool):
    """Legt eine Standard-Engine-Konfiguration an."""
    from config.defaults import default_engine_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    target = output or mgr.DEFAULT_CONFIG
    if target.exists() and not force:
        console.print(
            f"[yellow]Konfiguration existiert bereits: {target}[/yellow]\n"
            "Verwenden Sie [bold]--force[/bold] zum Überschreiben."
        )
        sys.exit(1)
    mgr.save(default_engine_config(), target)


# ─── DEMO ─────────────────────────────────────────────────────────────────────

@click.command("demo")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=DEFAULT_DATA_FILE,
              help="Zielpfad (.yaml, .yml oder .json).")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
def cmd_demo(output: Path, seed: int):
    """Erzeugt Demo-Planungsdaten (4 Klassen, kombinierte Veranstaltung, Labore)."""
    from config.manager import ConfigManager
    from data.demo_data import DemoDataGenerator

    data = DemoDataGenerator(seed=seed).generate()
    try:
        ConfigManager().save_planning_data(data, output)
    except ValueError as e:
        console.print(f"[red bold]Fehler:[/red bold] {e}")
        sys.exit(1)
    console.print(f"\n[dim]{data.summary()}[/dim]")
    console.print(f"[green]✓[/green] Demo-Daten gespeichert: {output}")


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.argument("datei", type=click.Path(path_type=Path))
def cmd_check(datei: Path):
    """Führt einen Machbarkeits-Check auf den Planungsdaten durch."""
    data = _load_data_or_abort(datei)
    console.print(f"\n{data.summary()}\n")
    report = data.validate_feasibility()
    report.print_rich()
    sys.exit(0 if report.is_feasible else 1)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.argument("datei", type=click.Path(path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), default=DEFAULT_RESULT_JSON,
              help="Pfad für das Ergebnis (JSON).")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Engine-Konfiguration (überschreibt die in den Daten).")
@click.option("--seed", type=int, default=None, help="Zufalls-Seed.")
@click.option("--max-regenerations", type=int, default=None,
              help="Maximale Anzahl kompletter Neuläufe.")
def cmd_generate(
    datei: Path,
    output: Path,
    config_path: Optional[Path],
    seed: Optional[int],
    max_regenerations: Optional[int],
):
    """Erzeugt die Stundenpläne aller Klassen und Lehrkräfte."""
    from analysis.solution_validator import SolutionValidator
    from solver.regeneration import RegenerationController

    data = _load_data_or_abort(datei, config_path)
    generation = data.config.generation
    updates = {}
    if seed is not None:
        updates["seed"] = seed
    if max_regenerations is not None:
        updates["max_regenerations"] = max_regenerations
    if updates:
        config = data.config.model_copy(
            update={"generation": generation.model_copy(update=updates)}
        )
        data = data.model_copy(update={"config": config})

    console.print(f"[bold]Stundenplan wird erzeugt...[/bold] ({len(data.classes)} Klassen)")
    result = RegenerationController(data).run()

    status = (
        "[bold green]✓ GÜLTIG[/bold green]"
        if not result.needs_regeneration
        else "[bold red]✗ KLASSEN MARKIERT[/bold red]"
    )
    lines = [
        status,
        f"Läufe: {result.run_control.attempt}/{result.run_control.max_attempts}",
        f"Klassen: {len(result.classes)} | Lehrkräfte: {len(result.teachers)}",
        f"Kombinierte Veranstaltungen: {len(result.combined_sessions)}",
        f"Zeit (letzter Lauf): {result.elapsed_seconds:.2f}s",
    ]
    console.print(Panel("\n".join(lines), title="Generierung", border_style="cyan"))
    if result.diagnostics:
        console.print("[yellow bold]Diagnosen:[/yellow bold]")
        for d in result.diagnostics:
            console.print(f"  [yellow]• {d}[/yellow]")

    SolutionValidator().validate(result, data).print_rich()

    result.save_json(output)
    console.print(f"[green]✓[/green] Ergebnis gespeichert: {output}")


# ─── SHOW ─────────────────────────────────────────────────────────────────────

@click.command("show")
@click.argument("ergebnis", type=click.Path(path_type=Path))
@click.option("--class", "class_name", default=None, help="Nur diese Klasse anzeigen.")
@click.option("--teacher", default=None, help="Nur diese Lehrkraft anzeigen.")
def cmd_show(ergebnis: Path, class_name: Optional[str], teacher: Optional[str]):
    """Zeigt Klassen- und Lehrerpläne eines Ergebnisses an."""
    result = _load_result_or_abort(ergebnis)

    if teacher:
        timetable = result.get_teacher(teacher)
        if timetable is None:
            console.print(f"[red]Lehrkraft '{teacher}' nicht gefunden.[/red]")
            sys.exit(1)
        console.print(_grid_table(timetable.name, timetable.header, timetable.rows))
        return

    classes = result.classes
    if class_name:
        timetable = result.get_class(class_name)
        if timetable is None:
            console.print(f"[red]Klasse '{class_name}' nicht gefunden.[/red]")
            sys.exit(1)
        classes = [timetable]

    for timetable in classes:
        title = timetable.name + (" [red](markiert)[/red]" if timetable.needs_regeneration else "")
        console.print(_grid_table(title, timetable.header(), timetable.rows()))
        faculty = Table(box=box.SIMPLE)
        faculty.add_column("Fach")
        faculty.add_column("Kürzel")
        faculty.add_column("Lehrkraft")
        faculty.add_column("Perioden", justify="right")
        for fd in timetable.faculty_details:
            faculty.add_row(
                fd.subject_name, fd.subject_code, fd.faculty_name, str(fd.periods_per_week)
            )
        console.print(faculty)


# ─── SWAP ─────────────────────────────────────────────────────────────────────

@click.command("swap")
@click.argument("ergebnis", type=click.Path(path_type=Path))
@click.argument("datei", type=click.Path(path_type=Path))
@click.option("--class", "class_name", required=True, help="Klasse der Quellzelle.")
@click.option("--to-class", default=None, help="Klasse der Zielzelle (Standard: --class).")
@click.option("--from", "source", required=True, help="Quellzelle als Tag:Spalte, z.B. Mon:1.")
@click.option("--to", "target", required=True, help="Zielzelle als Tag:Spalte, z.B. Tue:4.")
def cmd_swap(
    ergebnis: Path,
    datei: Path,
    class_name: str,
    to_class: Optional[str],
    source: str,
    target: str,
):
    """Tauscht zwei Zellen, sofern weder Lehrkraft noch Labor doppelt belegt würden."""
    from pydantic import ValidationError
    from solver.swap import CellRef, propose_swap

    result = _load_result_or_abort(ergebnis)
    data = _load_data_or_abort(datei)
    try:
        source_ref = CellRef.parse(class_name, source)
        target_ref = CellRef.parse(to_class or class_name, target)
    except (ValidationError, ValueError) as e:
        console.print(f"[red bold]Fehler:[/red bold] {e}")
        sys.exit(1)

    swap = propose_swap(result.class_grids(), data.roster, data.labs, source_ref, target_ref)
    if not swap.accepted:
        console.print(f"[red bold]Tausch abgelehnt:[/red bold] {swap.conflict_message}")
        sys.exit(1)

    updated = result.with_grids(swap.updated_class_grids, swap.updated_teacher_grids)
    updated.save_json(ergebnis)
    console.print(f"[green]✓[/green] Tausch übernommen: {source_ref} ↔ {target_ref}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgaben anzeigen.")
def cli(verbose: bool):
    """Kollegplan: Stundenpläne für Klassen, Lehrkräfte und Labore.

    Starten Sie mit: kollegplan demo && kollegplan generate output/demo_data.yaml
    """
    _setup_logging(verbose)


def main():
    """Einstiegspunkt. Zeigt beim ersten Aufruf ohne Argumente einen Willkommenshinweis."""
    from config.manager import ConfigManager

    if len(sys.argv) == 1 and ConfigManager().first_run_check():
        console.print(Panel(
            "[bold]Willkommen bei Kollegplan![/bold]\n\n"
            "Keine Engine-Konfiguration gefunden.\n"
            "Legen Sie mit [bold]kollegplan init[/bold] eine an und erzeugen Sie "
            "mit [bold]kollegplan demo[/bold] Beispieldaten.",
            border_style="cyan",
        ))
    cli()


# Befehle registrieren
cli.add_command(cmd_init)
cli.add_command(cmd_demo)
cli.add_command(cmd_check)
cli.add_command(cmd_generate)
cli.add_command(cmd_show)
cli.add_command(cmd_swap)


if __name__ == "__main__":
    main()
