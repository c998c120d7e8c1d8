"""Tests for cura.cli commands."""

import json

import pytest

from cura.cli import main

from conftest import bundle, note_resource, observation_resource, patient_resource


@pytest.fixture
def cli_dir(bundle_dir, write_bundle, monkeypatch):
    monkeypatch.delenv("CURA_DATA_DIR", raising=False)
    monkeypatch.delenv("CURA_STRICT", raising=False)
    write_bundle("doe.json", bundle(
        patient_resource(pid="patient-001"),
        {"resourceType": "Condition", "code": {"text": "Hypertension"}},
        observation_resource("1", "BP", value_string="150/95 mmHg", date="2025-08-15"),
        note_resource("<div>Seen today.</div>"),
    ))
    write_bundle("labs.json", bundle({"resourceType": "Observation"}))
    return bundle_dir


def _run(args, tmp_path):
    main(["--config", str(tmp_path / "missing.toml")] + args)


class TestList:
    def test_lists_patients(self, cli_dir, tmp_path, capsys):
        _run(["--data-dir", str(cli_dir), "list"], tmp_path)
        out = capsys.readouterr().out
        assert "John Doe" in out
        assert "(1 patients)" in out

    def test_empty_folder(self, tmp_path, capsys):
        _run(["--data-dir", str(tmp_path / "none"), "list"], tmp_path)
        assert "No patients found" in capsys.readouterr().out

    def test_bad_file_exits(self, cli_dir, tmp_path, capsys):
        (cli_dir / "bad.json").write_text("{")
        with pytest.raises(SystemExit) as exc:
            _run(["--data-dir", str(cli_dir), "list"], tmp_path)
        assert exc.value.code == 2
        assert "bad.json" in capsys.readouterr().err

    def test_lenient_skips_bad_file(self, cli_dir, tmp_path, capsys):
        (cli_dir / "bad.json").write_text("{")
        _run(["--data-dir", str(cli_dir), "--lenient", "list"], tmp_path)
        assert "John Doe" in capsys.readouterr().out


class TestShow:
    def test_markdown(self, cli_dir, tmp_path, capsys):
        _run(["--data-dir", str(cli_dir), "show", "PATIENT-001"], tmp_path)
        out = capsys.readouterr().out
        assert out.startswith("# John Doe")
        assert "Seen today." in out

    def test_json(self, cli_dir, tmp_path, capsys):
        _run(["--data-dir", str(cli_dir), "show", "patient-001", "--json"], tmp_path)
        data = json.loads(capsys.readouterr().out)
        assert data["conditions"] == ["Hypertension"]
        assert data["observations"][0]["ref_id"] == "FHIR:Observation/1"

    def test_unknown_patient(self, cli_dir, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            _run(["--data-dir", str(cli_dir), "show", "nobody"], tmp_path)
        assert exc.value.code == 1
        assert "not found" in capsys.readouterr().err


class TestScan:
    def test_counts_per_file(self, cli_dir, tmp_path, capsys):
        _run(["--data-dir", str(cli_dir), "scan"], tmp_path)
        out = capsys.readouterr().out
        assert "John Doe (patient-001)" in out
        assert "no patient" in out
        assert "(2 files)" in out


class TestContext:
    def test_prompt(self, cli_dir, tmp_path, capsys):
        _run(["--data-dir", str(cli_dir), "context", "patient-001", "--question", "Trend?"], tmp_path)
        out = capsys.readouterr().out
        assert "=== system ===" in out
        assert "Question: Trend?" in out
        assert "[FHIR:Observation/1]" in out


class TestInitConfig:
    def test_writes_file(self, tmp_path, capsys):
        out_path = tmp_path / "cura.toml"
        main(["init-config", "--output", str(out_path)])
        assert out_path.exists()
        assert "Config generated" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
