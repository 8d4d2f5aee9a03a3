"""kaipack CLI: pack a web-app directory, verify a built package."""

from __future__ import annotations

import zipfile
from pathlib import Path

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from kaipack.core import PackConfig, pack_pipeline
from kaipack.package.container import APPLICATION_ENTRY
from kaipack.security.archive import safe_extract_zip
from kaipack.types import ProgressEvent
from kaipack.validator import verify_package

app = typer.Typer(add_completion=False, help="Package web apps for sideloading")
console = Console()


def _fail(exc: BaseException) -> typer.Exit:
    console.print(
        str(exc) or exc.__class__.__name__, markup=False, highlight=False, soft_wrap=True
    )
    return typer.Exit(code=1)


def _print_progress(event: ProgressEvent) -> None:
    if event.kind == "entry":
        console.print(event.name, markup=False, highlight=False, soft_wrap=True)
        return
    if event.stage == "archive" and event.size is not None:
        console.print(f"archive size: {event.size} bytes", highlight=False)
    elif event.stage == "metadata":
        console.print(event.detail, markup=False, highlight=False, soft_wrap=True)
        console.print(">> metadata generated.", markup=False, highlight=False)
        return
    console.print(f">> {event.detail}.", markup=False, highlight=False)


def _run_pack(path: str, output: str, verbose: bool) -> None:
    config = PackConfig(source=Path(path), output=Path(output), verbose=verbose)
    try:
        result = pack_pipeline(config, progress=_print_progress)
    except Exception as exc:
        raise _fail(exc) from exc
    rprint(f"[green]Package written:[/green] {result.output}")


PathOption = typer.Option("app", "--path", "-p", envvar="KAIPACK_PATH", help="App directory")
OutputOption = typer.Option(
    "app.zip", "--output", "-o", envvar="KAIPACK_OUTPUT", help="Package file to write"
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Verbose output")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    path: str = PathOption,
    output: str = OutputOption,
    verbose: bool = VerboseOption,
) -> None:
    if ctx.invoked_subcommand is None:
        _run_pack(path, output, verbose)


@app.command()
def pack(
    path: str = PathOption,
    output: str = OutputOption,
    verbose: bool = VerboseOption,
) -> None:
    """Pack an app directory into a package."""
    _run_pack(path, output, verbose)


@app.command()
def verify(
    package: str = typer.Argument(..., help="Path to a package built by `kaipack pack`"),
    extract: str | None = typer.Option(
        None, "--extract", help="Also extract application.zip into this directory"
    ),
) -> None:
    try:
        report = verify_package(Path(package))
        if extract:
            with zipfile.ZipFile(package) as z:
                safe_extract_zip(z.read(APPLICATION_ENTRY), Path(extract))
    except Exception as exc:
        raise _fail(exc) from exc

    table = Table(title="Package")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("entries", ", ".join(report.entries))
    table.add_row("manifestURL", report.manifestURL)
    table.add_row("files", str(report.files))
    table.add_row("directories", str(report.directories))
    table.add_row("bytes", str(report.total_bytes))
    console.print(table)
    if extract:
        rprint(f"[green]Extracted to:[/green] {extract}")
    rprint("[green]Package verified.[/green]")


if __name__ == "__main__":
    app()
