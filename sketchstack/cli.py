"""CLI interface."""
from __future__ import annotations

import json
import logging
from typing import Optional

import typer
from pydantic import ValidationError

from sketchstack.agents.architect_agent import ArchitectAgent
from sketchstack.diagram.cloud_icons import normalize_provider
from sketchstack.errors import SketchStackError
from sketchstack.orchestrator.workflow import ArchitectureWorkflow, WorkflowResult, derive_diagram_plan, render
from sketchstack.tools.file_storage import save_json, save_text
from sketchstack.tools.schema_validator import extract_json, format_validation_error, validate_architecture_plan
from sketchstack.utils.file_utils import read_text_file
from sketchstack.utils.openai_client import ChatClient

app = typer.Typer(add_completion=False)


def _save(result: WorkflowResult, output_name: str, output_dir: Optional[str]) -> dict:
    artifacts = result.artifacts
    return {
        "plan": save_json(
            f"{output_name}.plan.json",
            result.architecture_plan.model_dump(mode="json", by_alias=True),
            output_dir,
        ),
        "drawio": save_text(f"{output_name}.drawio", artifacts.drawio_xml, output_dir),
        "excalidraw": save_json(f"{output_name}.excalidraw", artifacts.excalidraw_scene, output_dir),
        "shareUrl": artifacts.share_url,
        "viewerUrl": artifacts.viewer_url,
    }


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline stages.")):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def generate(
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Architecture description."),
    file: Optional[str] = typer.Option(None, "--file", "-f", help="Path to a text file with the description."),
    cloud_provider: str = typer.Option("neutral", "--cloud-provider", "-c"),
    style: Optional[str] = typer.Option(None, "--style", "-s", help="Override the detected architecture style."),
    output_name: str = typer.Option("architecture", "--output-name"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir"),
):
    """Generate draw.io and Excalidraw diagrams from a description."""
    if not file and not text:
        raise typer.BadParameter("Provide --file or --text")
    workflow = ArchitectureWorkflow(ArchitectAgent(ChatClient()))
    try:
        description = read_text_file(file) if file else text
        result = workflow.generate(description, cloud_provider, style)
    except (SketchStackError, OSError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(_save(result, output_name, output_dir), indent=2))


@app.command("render")
def render_plan(
    plan_file: str = typer.Argument(..., help="ArchitecturePlan JSON file."),
    cloud_provider: str = typer.Option("neutral", "--cloud-provider", "-c"),
    output_name: str = typer.Option("architecture", "--output-name"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir"),
):
    """Render an existing ArchitecturePlan without calling the model."""
    try:
        plan = validate_architecture_plan(extract_json(read_text_file(plan_file)))
    except ValidationError as exc:
        typer.echo(f"Invalid plan: {format_validation_error(exc)}", err=True)
        raise typer.Exit(code=1)
    except (OSError, ValueError) as exc:
        typer.echo(f"Invalid plan: {exc}", err=True)
        raise typer.Exit(code=1)

    provider = normalize_provider(cloud_provider)
    diagram_plan = derive_diagram_plan(plan)
    result = WorkflowResult(
        architecture_plan=plan,
        diagram_plan=diagram_plan,
        artifacts=render(diagram_plan, provider),
        cloud_provider=provider,
    )
    typer.echo(json.dumps(_save(result, output_name, output_dir), indent=2))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    reload: bool = typer.Option(False, "--reload"),
):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("sketchstack.server:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
