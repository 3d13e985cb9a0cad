import json
from pathlib import Path

import pytest

from encoder_stage.cli import PLUGIN_DIRS_ENV, main


@pytest.fixture(autouse=True)
def _no_env_plugin_dirs(monkeypatch):
    monkeypatch.delenv(PLUGIN_DIRS_ENV, raising=False)


def _write(path: Path, text: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def host(tmp_path):
    project = _write(tmp_path / "Host" / "Host.uproject", "{}")
    plugin = _write(tmp_path / "Host" / "Plugins" / "Vitruvio" / "Vitruvio.uplugin", "{}")
    return project, plugin.parent


def test_plan_json_with_consumer(host, capsys):
    project, consumer = host

    assert main(["plan", "--project", str(project), "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert len(data["preBuildSteps"]) == 2
    assert [s["kind"] for s in data["postBuildSteps"]] == ["announce", "copy", "announce", "copy"]
    assert data["postBuildSteps"][1]["destination"] == str(
        consumer / "Source" / "ThirdParty" / "UnrealGeometryEncoderLib" / "lib" / "Win64" / "Release"
    )


def test_plan_without_consumer_reports_it(tmp_path, capsys):
    project = _write(tmp_path / "Host" / "Host.uproject", "{}")

    assert main(["plan", "--project", str(project)]) == 0

    err = capsys.readouterr().err
    assert "No plugin matching 'Vitruvio' found" in err
    assert "Pre-build steps: 2" in err
    assert "Post-build steps: 0" in err


def test_plan_off_win64_is_empty(host, capsys):
    project, _ = host

    assert main(["plan", "--project", str(project), "--platform", "Linux", "--json"]) == 0

    assert json.loads(capsys.readouterr().out) == {"preBuildSteps": [], "postBuildSteps": []}


def test_plugin_dirs_from_environment(tmp_path, monkeypatch, capsys):
    project = _write(tmp_path / "Host" / "Host.uproject", "{}")
    engine_plugin = _write(tmp_path / "Engine" / "Vitruvio" / "Vitruvio.uplugin", "{}")
    monkeypatch.setenv(PLUGIN_DIRS_ENV, str(tmp_path / "Engine"))

    assert main(["plan", "--project", str(project), "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["postBuildSteps"][3]["destination"] == str(
        engine_plugin.parent / "Source" / "ThirdParty" / "UnrealGeometryEncoderLib" / "include"
    )


def test_pre_and_post_build_stage_artifacts(host):
    project, consumer = host
    bins = project.parent / "Binaries" / "Win64" / "UnrealGeometryEncoder"
    _write(bins / "stale.dll")
    _write(project.parent / "Source" / "UnrealGeometryEncoder" / "Public" / "Encoder.h", "h")

    assert main(["pre-build", "--project", str(project)]) == 0
    assert not (bins / "stale.dll").exists()

    _write(bins / "UnrealGeometryEncoder.dll", "dll")
    assert main(["post-build", "--project", str(project)]) == 0

    lib = consumer / "Source" / "ThirdParty" / "UnrealGeometryEncoderLib"
    assert (lib / "lib" / "Win64" / "Release" / "UnrealGeometryEncoder.dll").read_text(encoding="utf-8") == "dll"
    assert (lib / "include" / "Encoder.h").read_text(encoding="utf-8") == "h"


def test_dry_run_touches_nothing(host):
    project, consumer = host
    stale = _write(project.parent / "Binaries" / "Win64" / "UnrealGeometryEncoder" / "stale.dll")

    assert main(["pre-build", "--project", str(project), "--dry-run"]) == 0

    assert stale.exists()


def test_post_build_failure_exits_1(host, capsys):
    project, _ = host
    # nothing was built, so the binaries folder does not exist

    assert main(["post-build", "--project", str(project)]) == 1

    assert "post-build failed" in capsys.readouterr().err


def test_config_file_drives_the_run(tmp_path, capsys):
    project = _write(tmp_path / "Host" / "Host.uproject", "{}")
    cfg = _write(
        tmp_path / "stage.json",
        json.dumps(
            {
                "project": "Host/Host.uproject",
                "plugin_fragment": "Geometry",
                "plugins": [{"identifier": "GeometryConsumer", "path": "/opt/Consumer/Consumer.uplugin"}],
            }
        ),
    )

    assert main(["plan", "--config", str(cfg), "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["preBuildSteps"][1]["sourcePattern"] == str(
        project.parent / "Binaries" / "Win64" / "UnrealGeometryEncoder" / "*.*"
    )
    assert data["postBuildSteps"][3]["destination"] == "/opt/Consumer/Source/ThirdParty/UnrealGeometryEncoderLib/include"


def test_invalid_config_exits_2(tmp_path, capsys):
    cfg = _write(tmp_path / "stage.json", json.dumps({"platform": "Win64"}))

    assert main(["plan", "--config", str(cfg)]) == 2

    assert "project" in capsys.readouterr().err


def test_missing_project_and_config_exits_2(capsys):
    assert main(["plan"]) == 2

    assert "Either --config or --project is required" in capsys.readouterr().err


def test_relative_config_path_resolves_against_config_folder(tmp_path, monkeypatch, capsys):
    _write(tmp_path / "Game.uproject", "{}")
    _write(tmp_path / "stage.json", json.dumps({"project": "Game.uproject"}))
    monkeypatch.chdir(tmp_path)

    assert main(["plan", "--config", "stage.json", "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["preBuildSteps"][1]["sourcePattern"] == str(
        tmp_path / "Binaries" / "Win64" / "UnrealGeometryEncoder" / "*.*"
    )


@pytest.mark.parametrize("command", ["pre-build", "post-build"])
def test_json_is_rejected_outside_plan(host, command, capsys):
    project, _ = host

    with pytest.raises(SystemExit) as exc:
        main([command, "--project", str(project), "--json"])

    assert exc.value.code == 2
    assert "--json is only valid with the 'plan' command" in capsys.readouterr().err
