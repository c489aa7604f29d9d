import tomllib
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parents[1] / "pyproject.toml"


def test_project_metadata_points_script_at_cli_app() -> None:
    project = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))["project"]

    assert project["scripts"]["unifi-cli"] == "unifi_cli.cli:app"
    assert "readme" not in project
