"""Typer CLI entrypoint and command definitions for kubecost-adapter."""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from kubecost_adapter.core.defaults import CONFIG_PATH_ENV, DEFAULT_HOST, DEFAULT_PORT

if TYPE_CHECKING:
    from kubecost_adapter.adapters.kubecost.client import KubecostClient

app = typer.Typer()

_CONFIG_HELP = f"YAML config file (defaults to ${CONFIG_PATH_ENV})"


def _client(config: str | None) -> "KubecostClient":
    from kubecost_adapter.adapters.kubecost.client import KubecostClient
    from kubecost_adapter.core.config import load_config

    path = config or os.environ.get(CONFIG_PATH_ENV) or None
    return KubecostClient(load_config(path))


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Query Kubecost allocation costs and serve them as a cost-source plugin."""
    from kubecost_adapter.core.logging import configure_logging

    configure_logging(logging.DEBUG if verbose else logging.INFO)


# -- version -------------------------------------------------------------------


@app.command("version")
def version_cmd(
    full: bool = typer.Option(False, "--full", help="Show detailed build information"),
) -> None:
    """Print version information."""
    from kubecost_adapter.core.version import full_version_string, version_string

    typer.echo(full_version_string() if full else version_string())


# -- supports ------------------------------------------------------------------


@app.command("supports")
def supports_cmd(
    resource_type: str = typer.Argument(..., help="Resource type, e.g. k8s-pod"),
) -> None:
    """Exit 0 if the resource type can be priced, 1 otherwise."""
    from kubecost_adapter.adapters.kubecost.mapping import supports

    supported = supports(resource_type)
    typer.echo("supported" if supported else "unsupported")
    if not supported:
        raise typer.Exit(code=1)


# -- cost ----------------------------------------------------------------------
cost_app = typer.Typer()
app.add_typer(cost_app, name="cost")


@cost_app.command("actual")
def cost_actual_cmd(
    selector: str = typer.Argument(..., help="Resource selector, e.g. pod/default/api"),
    window: str = typer.Option("", help="Relative window (30d, 24h, 1h30m)"),
    start: str = typer.Option("", help="Explicit RFC3339 start (requires --end)"),
    end: str = typer.Option("", help="Explicit RFC3339 end (requires --start)"),
    aggregate: list[str] = typer.Option(None, "--aggregate", help="Aggregation key (repeatable)"),
    config: str = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Print observed cost points for a resource as JSON."""
    from kubecost_adapter.core.errors import KubecostError

    client = _client(config)
    spec = (start, end) if start or end else (window or None)
    try:
        result = client.fetch_actual_cost(selector, spec, aggregate_by=aggregate)
    except KubecostError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(result.model_dump_json(indent=2))


@cost_app.command("projected")
def cost_projected_cmd(
    selector: str = typer.Argument(..., help="Resource selector, e.g. namespace/default"),
    config: str = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Print a monthly projection from the last 30 days as JSON."""
    from kubecost_adapter.core.errors import KubecostError

    client = _client(config)
    try:
        result = client.fetch_projected_cost(selector)
    except KubecostError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(result.model_dump_json(indent=2))


@cost_app.command("predict")
def cost_predict_cmd(
    spec_file: str = typer.Option(..., "--spec-file", help="Workload manifest (YAML or JSON)"),
    cluster_id: str = typer.Option("", "--cluster-id", help="Cluster ID (defaults to config)"),
    namespace: str = typer.Option("", "--namespace", help="Default namespace (defaults to config)"),
    window: str = typer.Option("", help="Prediction window (defaults to config)"),
    no_usage: bool = typer.Option(False, "--no-usage", help="Ignore historical usage"),
    config: str = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Print the backend's before/after/delta cost for a workload manifest."""
    from kubecost_adapter.core.errors import KubecostError
    from kubecost_adapter.core.types import PredictionRequest

    path = Path(spec_file)
    if not path.exists():
        typer.echo(f"File not found: {path}", err=True)
        raise typer.Exit(code=1)

    client = _client(config)
    request = PredictionRequest(
        cluster_id=cluster_id,
        default_namespace=namespace,
        window=window,
        no_usage=no_usage,
        workload_spec=path.read_text(encoding="utf-8"),
    )
    try:
        result = client.predict(request)
    except KubecostError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(result.model_dump_json(indent=2))


# -- serve ---------------------------------------------------------------------


@app.command("serve")
def serve_cmd(
    host: str = typer.Option(DEFAULT_HOST, help="Listen address"),
    port: int = typer.Option(DEFAULT_PORT, help="Listen port"),
    config: str = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Serve the plugin procedures over HTTP."""
    import uvicorn

    from kubecost_adapter.core.version import version_string
    from kubecost_adapter.server.app import create_app

    client = _client(config)
    logging.getLogger(__name__).info("kubecost-adapter starting, %s", version_string())
    uvicorn.run(create_app(client), host=host, port=port, log_level="info")


if __name__ == "__main__":
    app()
