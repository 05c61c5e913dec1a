"""CLI interface for Frame Audit."""
import json
import logging
import sys
from typing import Optional

import typer

app = typer.Typer(help="Frame Audit - framing analysis of scenarios")

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Port (default: PORT or 3001)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP API."""
    import uvicorn

    from ..config.settings import load_settings

    settings = load_settings()
    _configure_logging(settings.server.log_level)
    uvicorn.run(
        "services.api.app.main:create_app",
        factory=True,
        host=host,
        port=port or settings.server.port,
        reload=reload,
    )


@app.command()
def analyze(
    scenario: str = typer.Argument(..., help="Scenario text to analyze"),
    demo: bool = typer.Option(False, "--demo", help="Use the offline demo provider"),
    indent: int = typer.Option(2, help="JSON indent"),
    audit: bool = typer.Option(False, "--audit", help="Print the LLM audit summary to stderr"),
):
    """Analyze one scenario and print the result as JSON."""
    from services.api.app.context import build_context
    from shared.schemas.analysis import dump_analysis_result
    from shared.schemas.errors import ErrorResponse

    from ..config.settings import load_settings

    settings = load_settings()
    _configure_logging(settings.server.log_level)
    if demo:
        settings.llm.provider = "demo"
        settings.llm.model = "demo"
    context = build_context(settings)

    outcome = context.orchestrator.analyze(scenario, identifier="cli")
    if audit:
        typer.echo(json.dumps(context.audit.summary(), indent=indent), err=True)
    if isinstance(outcome, ErrorResponse):
        typer.echo(json.dumps(outcome.model_dump(), ensure_ascii=False, indent=indent), err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(dump_analysis_result(outcome), ensure_ascii=False, indent=indent))


@app.command()
def models(
    provider: Optional[str] = typer.Option(None, help="Only list models for this provider"),
):
    """List the supported providers and models."""
    from core.providers.registry import get_model_catalog

    for entry in get_model_catalog():
        if provider and entry["provider"] != provider:
            continue
        typer.echo(f"{entry['provider']:<10} {entry['model_id']:<28} {entry['tier']:<9} {entry['label']}")


@app.command()
def prompt(
    scenario: str = typer.Argument("", help="Scenario to embed in the user prompt"),
):
    """Print the system prompt and the user prompt for a scenario."""
    from ..analysis.prompt_builder import build_prompts

    system_prompt, user_prompt = build_prompts(scenario)
    typer.echo("=== SYSTEM ===")
    typer.echo(system_prompt)
    typer.echo("=== USER ===")
    typer.echo(user_prompt)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    sys.exit(main())
