"""Typer-powered command line interface for the OpenAI-compatible executor."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from .auth import Auth
from .config import auth_from_settings, executor_config_from_settings, load_configuration, select_provider
from .executor import OpenAICompatExecutor, PreparedRequest
from .wire_api import WIRE_API_ATTRIBUTE, build_request_url, resolve_wire_api

app = typer.Typer(
    add_completion=False,
    help=(
        "Resolve wire APIs and endpoint URLs for OpenAI-compatible backends, "
        "and send JSON requests to them."
    ),
)


def _parse_attributes(pairs: List[str]) -> Dict[str, str]:
    """Turn ``KEY=VALUE`` arguments into an attribute mapping."""

    attributes: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Attributes must look like KEY=VALUE, got '{pair}'.")
        attributes[key.strip()] = value
    return attributes


def _read_payload(path: Optional[Path]) -> Dict[str, Any]:
    """Load the request body from a file or standard input."""

    if path is None or str(path) == "-":
        text = sys.stdin.read()
    else:
        if not path.exists():
            raise typer.BadParameter(f"Payload file '{path}' does not exist.")
        text = path.read_text(encoding="utf-8")
    if not text.strip():
        raise typer.BadParameter("Provide a JSON payload via --payload or standard input.")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Payload is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise typer.BadParameter("Payload root must be a JSON object.")
    return payload


def _build_executor(name: str, settings: Dict[str, Any]) -> OpenAICompatExecutor:
    return OpenAICompatExecutor(name, executor_config_from_settings(settings))


def _raise_cli_error(exc: Exception) -> None:
    """Render an informative error message and abort the command."""

    message = str(exc).strip() or exc.__class__.__name__
    lowered = message.lower()
    if any(keyword in lowered for keyword in ("credential", "api key", "apikey", "token")):
        message = (
            f"{message}\nProvide the required credentials via environment variables or "
            "a configuration file supplied with --config."
        )
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1) from exc


def _render_prepared(prepared: PreparedRequest, *, json_output: bool) -> None:
    redacted = {key: ("<redacted>" if key.lower() == "authorization" else value)
                for key, value in prepared.headers.items()}
    if json_output:
        typer.echo(json.dumps({
            "url": prepared.url,
            "wire_api": prepared.wire_api.value,
            "headers": redacted,
            "body": prepared.body,
        }, indent=2, ensure_ascii=False))
        return
    typer.echo(f"POST {prepared.url} ({prepared.wire_api.value})")


@app.command()
def resolve(
    base_url: str = typer.Argument(..., help="Provider base URL, e.g. https://api.openai.com/v1"),
    *,
    wire_api: Optional[str] = typer.Option(None, "--wire-api", "-w", help="Value for the wire_api attribute."),
    attrs: Optional[List[str]] = typer.Option(None, "--attr", "-a", help="Extra auth attribute as KEY=VALUE."),
    json_output: bool = typer.Option(False, "--json/--no-json", help="Emit JSON instead of plain text."),
) -> None:
    """Print the wire API and endpoint URL for a base URL and auth attributes."""

    attributes = _parse_attributes(list(attrs or []))
    if wire_api is not None:
        attributes[WIRE_API_ATTRIBUTE] = wire_api
    auth = Auth(attributes=attributes) if attributes else None
    variant = resolve_wire_api(auth)
    url = build_request_url(base_url, auth)
    if json_output:
        typer.echo(json.dumps({"wire_api": variant.value, "url": url}, indent=2))
        return
    typer.echo(f"{variant.value} {url}")


@app.command()
def send(
    *,
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Provider name from the configuration."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a JSON or YAML configuration file."),
    payload: Optional[Path] = typer.Option(None, "--payload", "-d", help="JSON request body file, '-' for stdin."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only print the prepared request."),
    json_output: bool = typer.Option(True, "--json/--no-json", help="Emit JSON (default)."),
) -> None:
    """Send a JSON body to the endpoint selected for a configured provider."""

    body = _read_payload(payload)
    try:
        name, settings = select_provider(load_configuration(config), provider)
        executor = _build_executor(name, settings)
        auth = auth_from_settings(name, settings)
        if dry_run:
            _render_prepared(executor.prepare(body, auth), json_output=json_output)
            return
        response = executor.execute(body, auth)
    except Exception as exc:
        _raise_cli_error(exc)
    if json_output:
        typer.echo(json.dumps(response, indent=2, ensure_ascii=False))
    else:
        typer.echo(str(response))


def main() -> None:
    """Entry point compatible with ``python -m compat_executor.cli``."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
