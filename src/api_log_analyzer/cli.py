"""CLI entry point for api-log-analyzer."""

import logging
from pathlib import Path

import click

from api_log_analyzer.analyzer import create_analysis_result
from api_log_analyzer.config import Settings, load_settings
from api_log_analyzer.generator.client import ClientGenerator
from api_log_analyzer.generator.curl import generate_curl
from api_log_analyzer.parser.base import AnalysisResult, EndpointGroup
from api_log_analyzer.storage import AnalysisStore, StorageError, StorageQuotaError


def _read_log(log_path: Path, settings: Settings) -> str:
    """Read a log file, enforcing the configured size cap."""
    size = log_path.stat().st_size
    if size > settings.max_input_bytes:
        raise click.ClickException(
            f"{log_path} is {size} bytes; the limit is {settings.max_input_bytes} bytes."
        )
    return log_path.read_text(encoding="utf-8", errors="replace")


def _analyze(log_path: Path, settings: Settings, name: str | None = None) -> AnalysisResult:
    click.echo(f"Parsing {log_path}...")
    content = _read_log(log_path, settings)
    result = create_analysis_result(name or log_path.name, content, classifier=settings.classifier())
    stats = result.stats
    click.echo(
        f"Found {stats.api_requests} API calls across {stats.unique_endpoints} endpoints "
        f"({stats.total_lines} lines, {stats.junk_filtered} junk)."
    )
    return result


def _store(settings: Settings) -> AnalysisStore:
    return AnalysisStore(settings.store_path, max_analyses=settings.max_analyses, max_bytes=settings.max_store_bytes)


def _filter_groups(groups: list[EndpointGroup], selectors: tuple[str, ...]) -> list[EndpointGroup]:
    """Keep groups matching any 'METHOD /path' or '/path' selector."""
    if not selectors:
        return groups
    result = []
    for group in groups:
        for sel in selectors:
            parts = sel.split(maxsplit=1)
            if len(parts) == 2:
                method, path = parts
                if group.method == method.upper() and group.endpoint == path:
                    result.append(group)
                    break
            elif group.endpoint == sel:
                result.append(group)
                break
    return result


@click.group()
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: bool):
    """API Log Analyzer — extract API traffic from console logs."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    ctx.obj = load_settings(config_path)


@main.command()
@click.argument("log_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-n", "--name", default=None, help="Analysis name (defaults to the file name).")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the analysis as JSON.")
@click.option("--save/--no-save", default=True, help="Keep the analysis in history.")
@click.pass_obj
def analyze(settings: Settings, log_path: Path, name: str | None, output: Path | None, save: bool):
    """Extract API calls and endpoint groups from a log file."""
    result = _analyze(log_path, settings, name)

    for group in result.endpoints:
        click.echo(f"  {group.method:<6} {group.endpoint}  ({len(group.calls)} calls)")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.model_dump_json(indent=2, exclude={"raw_logs"}), encoding="utf-8")
        click.echo(f"Analysis saved to {output}")

    if save:
        try:
            _store(settings).save(result)
        except StorageQuotaError as e:
            raise click.ClickException(f"History is full: {e}") from e
        except StorageError as e:
            raise click.ClickException(str(e)) from e
        click.echo(f"Saved to history as {result.id}")


@main.command()
@click.argument("log_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output path for the TypeScript client.")
@click.pass_obj
def gen_client(settings: Settings, log_path: Path, output: Path):
    """Generate a typed TypeScript client from a log file."""
    result = _analyze(log_path, settings)

    gen = ClientGenerator(client_name=settings.client_name, client_import=settings.client_import)
    code = gen.generate(result.endpoints)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(code, encoding="utf-8")
    click.echo(f"Client saved to {output}")


@main.command()
@click.argument("log_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--endpoint", "selectors", multiple=True, help="Only endpoints matching 'METHOD /path' or '/path'.")
@click.pass_obj
def curl(settings: Settings, log_path: Path, selectors: tuple[str, ...]):
    """Print a curl command for each endpoint seen in a log file."""
    result = _analyze(log_path, settings)
    for group in _filter_groups(result.endpoints, selectors):
        click.echo(f"\n# {group.method} {group.endpoint}")
        click.echo(generate_curl(group.method, group.calls[0].url, group.sample_request))


@main.group()
def history():
    """Manage saved analyses."""
    pass


@history.command("list")
@click.pass_obj
def history_list(settings: Settings):
    """List saved analyses, newest first."""
    try:
        summaries = _store(settings).list_summaries()
    except StorageError as e:
        raise click.ClickException(str(e)) from e
    if not summaries:
        click.echo("No saved analyses.")
        return
    for s in summaries:
        click.echo(f"{s.id}  {s.created_at}  {s.name}  ({s.api_requests} calls, {s.unique_endpoints} endpoints)")


@history.command("show")
@click.argument("analysis_id")
@click.pass_obj
def history_show(settings: Settings, analysis_id: str):
    """Print a saved analysis as JSON."""
    try:
        result = _store(settings).get(analysis_id)
    except StorageError as e:
        raise click.ClickException(str(e)) from e
    if result is None:
        raise click.ClickException(f"No analysis with id {analysis_id}")
    click.echo(result.model_dump_json(indent=2, exclude={"raw_logs"}))


@history.command("delete")
@click.argument("analysis_id")
@click.pass_obj
def history_delete(settings: Settings, analysis_id: str):
    """Delete a saved analysis."""
    try:
        deleted = _store(settings).delete(analysis_id)
    except StorageError as e:
        raise click.ClickException(str(e)) from e
    if not deleted:
        raise click.ClickException(f"No analysis with id {analysis_id}")
    click.echo(f"Deleted {analysis_id}")


@history.command("clear")
@click.confirmation_option(prompt="Delete all saved analyses?")
@click.pass_obj
def history_clear(settings: Settings):
    """Delete all saved analyses."""
    try:
        _store(settings).clear()
    except StorageError as e:
        raise click.ClickException(str(e)) from e
    click.echo("History cleared.")
