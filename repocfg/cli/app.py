"""
Aplicación CLI de repocfg.

Solo compone comandos y formatea la salida; la lectura y validación viven en repocfg.core.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from repocfg import __version__
from repocfg.core import ATLANTIS_YAML_FILENAME, ConfigError, is_not_found, read_config
from repocfg.core.valid import Spec, Stage

app = typer.Typer(
    name="repocfg",
    help="repocfg - Lector y validador de atlantis.yaml",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

REPO_DIR_ENVVAR = "REPOCFG_REPO_DIR"


def _repo_dir_argument():
    return typer.Argument(
        Path("."),
        envvar=REPO_DIR_ENVVAR,
        help="Directorio del repo que contiene atlantis.yaml",
    )


def _load(repo_dir: Path) -> Optional[Spec]:
    """Lee la config; None si no existe. Otros errores terminan con código 1."""
    try:
        return read_config(repo_dir)
    except ConfigError as e:
        if is_not_found(e):
            return None
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        console.print(f"[dim]Tipo de error: {e.kind.value}[/dim]")
        raise typer.Exit(code=1)


def _describe_stage(stage: Stage) -> str:
    parts = []
    for step in stage.steps:
        if step.run_command:
            parts.append(f"run: {' '.join(step.run_command)}")
        elif step.extra_args:
            parts.append(f"{step.step_name} {' '.join(step.extra_args)}")
        else:
            parts.append(step.step_name)
    return escape(", ".join(parts)) or "[dim](sin pasos)[/dim]"


@app.command()
def validate(
    repo_dir: Path = _repo_dir_argument(),
    strict_missing: bool = typer.Option(
        False, "--strict-missing", help=f"Falla si no existe {ATLANTIS_YAML_FILENAME}"
    ),
):
    """
    Valida el atlantis.yaml de un repo

    Ejemplo: repocfg validate ./infra-repo
    """
    spec = _load(repo_dir)
    if spec is None:
        console.print(f"[yellow]⚠️ No existe {ATLANTIS_YAML_FILENAME} en {repo_dir}; se usan defaults[/yellow]")
        if strict_missing:
            raise typer.Exit(code=1)
        return
    console.print(
        f"[bold green]✅ {ATLANTIS_YAML_FILENAME} válido[/bold green] "
        f"[dim]({len(spec.projects)} proyectos, {len(spec.workflows)} workflows)[/dim]"
    )


@app.command()
def projects(repo_dir: Path = _repo_dir_argument()):
    """Lista los proyectos resueltos (con defaults aplicados)"""
    spec = _load(repo_dir)
    if spec is None:
        console.print(f"[yellow]⚠️ No existe {ATLANTIS_YAML_FILENAME} en {repo_dir}[/yellow]")
        return
    table = Table(title="Proyectos", show_header=True, header_style="bold cyan")
    table.add_column("Nombre", style="cyan")
    table.add_column("Dir", style="green")
    table.add_column("Workspace", style="green")
    table.add_column("Workflow", style="yellow")
    table.add_column("Autoplan", style="yellow")
    for p in spec.projects:
        if p.autoplan.enabled:
            autoplan = escape(", ".join(p.autoplan.when_modified))
        else:
            autoplan = "[dim]desactivado[/dim]"
        table.add_row(
            escape(p.name) if p.name else "[dim]-[/dim]",
            escape(p.dir),
            escape(p.workspace),
            escape(p.workflow or "default"),
            autoplan,
        )
    console.print(table)


@app.command()
def workflows(repo_dir: Path = _repo_dir_argument()):
    """Lista los workflows definidos y sus pasos de plan/apply"""
    spec = _load(repo_dir)
    if spec is None:
        console.print(f"[yellow]⚠️ No existe {ATLANTIS_YAML_FILENAME} en {repo_dir}[/yellow]")
        return
    if not spec.workflows:
        console.print("[dim]No hay workflows personalizados[/dim]")
        return
    table = Table(title="Workflows", show_header=True, header_style="bold cyan")
    table.add_column("Workflow", style="cyan")
    table.add_column("Plan", style="green")
    table.add_column("Apply", style="yellow")
    for name, workflow in spec.workflows.items():
        table.add_row(escape(name), _describe_stage(workflow.plan), _describe_stage(workflow.apply))
    console.print(table)


@app.command()
def version():
    """Muestra la versión de repocfg"""
    console.print(Panel.fit(
        "[bold cyan]repocfg[/bold cyan]\n"
        f"[dim]Lector y validador de {ATLANTIS_YAML_FILENAME}[/dim]\n\n"
        f"[bold]Versión:[/bold] {__version__}",
        border_style="cyan"
    ))


def main():
    app()
