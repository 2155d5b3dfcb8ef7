import json

from typer.testing import CliRunner

from sketchstack.cli import app

runner = CliRunner()


def test_render_writes_artifacts(tmp_path, plan_json):
    plan_file = tmp_path / "plan.json"
    plan_file.write_text(f"```json\n{plan_json}\n```", encoding="utf-8")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["render", str(plan_file), "--cloud-provider", "azure", "--output-name", "shop", "--output-dir", str(out_dir)],
    )

    assert result.exit_code == 0, result.output
    paths = json.loads(result.stdout)
    assert (out_dir / "shop.drawio").read_text(encoding="utf-8").startswith("<mxGraphModel")
    scene = json.loads((out_dir / "shop.excalidraw").read_text(encoding="utf-8"))
    assert scene["type"] == "excalidraw"
    saved_plan = json.loads((out_dir / "shop.plan.json").read_text(encoding="utf-8"))
    assert saved_plan["relationships"][0]["from"] == "web"
    assert paths["shareUrl"].startswith("https://app.diagrams.net/#R")


def test_render_rejects_invalid_plan(tmp_path):
    plan_file = tmp_path / "plan.json"
    plan_file.write_text('{"relationships": []}', encoding="utf-8")
    result = runner.invoke(app, ["render", str(plan_file), "--output-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "components" in result.output


def test_generate_requires_input():
    result = runner.invoke(app, ["generate"])
    assert result.exit_code != 0
