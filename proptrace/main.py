"""proptrace CLI - static prop usage tracking for React components."""
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table
from rich.markup import escape

from proptrace.config import get_config
from proptrace.analyzer.analysis import FileAnalysis, PropUsageAnalyzer
from proptrace.analyzer.parser import LanguageParser
from proptrace.utils.logger import configure_logging
from proptrace.utils.safe_console import SafeConsole

app = typer.Typer(
    name="proptrace",
    help="Find props React components declare but never read, and props they read but never declare",
    add_completion=False
)
console = SafeConsole()


def collect_source_files(paths: List[str], excluded_dirs: frozenset) -> List[Path]:
    """Expand files and directories into the supported source files they contain.

    Raises:
        FileNotFoundError: If a path does not exist
    """
    files: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if not path.exists():
            raise FileNotFoundError(raw)
        if path.is_file():
            files.append(path)
            continue
        for extension in sorted(LanguageParser.SUPPORTED_LANGUAGES):
            for file_path in path.rglob(f'*{extension}'):
                if not any(part in excluded_dirs for part in file_path.parts):
                    files.append(file_path)
    return sorted(set(files))


def run_analysis(paths: List[str], react_version: Optional[str], verbose: bool) -> List[FileAnalysis]:
    """Shared setup for both commands; exits with code 1 on bad input."""
    configure_logging(verbose)
    try:
        config = get_config()
        engine_config = config.engine_config(react_version)
        files = collect_source_files(paths, config.excluded_dirs)
    except FileNotFoundError as exc:
        console.print(f"[bold red]Error:[/bold red] Path does not exist: {escape(str(exc))}")
        raise typer.Exit(1)
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(1)

    analyzer = PropUsageAnalyzer(engine_config)
    results = []
    for file_path in files:
        analysis = analyzer.analyze_file(file_path)
        if analysis is not None:
            results.append(analysis)
    return results


@app.command()
def audit(
    paths: List[str] = typer.Argument(..., help="Files or directories to analyze"),
    react_version: str = typer.Option(None, "--react-version", help="React version of the analyzed code (default: latest)"),
    output_json: bool = typer.Option(False, "--json", help="Emit findings as JSON"),
    fail_on_findings: bool = typer.Option(False, "--fail-on-findings", help="Exit with code 1 when any finding is reported"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug traces"),
):
    """Report unused and undeclared props per component."""
    results = run_analysis(paths, react_version, verbose)
    total = sum(len(analysis.findings) for analysis in results)

    if output_json:
        payload = [
            {'file': analysis.file_path, 'findings': [f.to_dict() for f in analysis.findings]}
            for analysis in results
        ]
        typer.echo(json.dumps(payload, indent=2))
    else:
        for analysis in results:
            if not analysis.findings:
                continue
            table = Table(title=escape(analysis.file_path), show_header=True, header_style="bold magenta")
            table.add_column("Line", justify="right", style="dim")
            table.add_column("Component", style="cyan")
            table.add_column("Prop", style="yellow")
            table.add_column("Issue")
            for finding in analysis.findings:
                issue = "declared but never used" if finding.kind == 'unused' else "used but not declared"
                table.add_row(str(finding.line), escape(finding.component), escape(finding.prop), issue)
            console.print(table)

        if total:
            console.print(f"\n[bold yellow]{total} prop issue(s)[/bold yellow] in {len(results)} file(s)")
        else:
            console.print(f"[bold green]✓ No prop issues found[/bold green] ({len(results)} file(s))")

    if fail_on_findings and total:
        raise typer.Exit(1)


@app.command()
def usage(
    paths: List[str] = typer.Argument(..., help="Files or directories to analyze"),
    react_version: str = typer.Option(None, "--react-version", help="React version of the analyzed code (default: latest)"),
    output_json: bool = typer.Option(False, "--json", help="Emit usage records as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug traces"),
):
    """List the props each component reads."""
    results = run_analysis(paths, react_version, verbose)

    if output_json:
        payload = []
        for analysis in results:
            payload.append({
                'file': analysis.file_path,
                'components': [
                    {
                        'name': component.name,
                        'kind': component.kind,
                        'line': component.line,
                        'suppressed': component.ignore_unused_props_validation,
                        'used': [
                            {'name': r.name, 'path': list(r.path), 'line': r.location[0], 'column': r.location[1]}
                            for r in component.used_props
                        ],
                    }
                    for component in analysis.components
                ],
            })
        typer.echo(json.dumps(payload, indent=2))
        return

    for analysis in results:
        table = Table(title=escape(analysis.file_path), show_header=True, header_style="bold magenta")
        table.add_column("Component", style="cyan")
        table.add_column("Kind", style="dim")
        table.add_column("Used props", style="green")
        table.add_column("Suppressed", justify="center")
        for component in analysis.components:
            used = sorted({record.dotted for record in component.used_props})
            table.add_row(
                escape(component.name),
                component.kind or '',
                escape(', '.join(used)) or '-',
                "yes" if component.ignore_unused_props_validation else "",
            )
        console.print(table)


if __name__ == "__main__":
    app()
