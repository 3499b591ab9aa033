"""
Tests for the CLI — options, config defaults, output and exit codes.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from protostub.main import cli


@pytest.fixture
def runner(tmp_path: Path, monkeypatch) -> CliRunner:
    """A runner whose working directory holds no protostub.yml."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.delenv("PROTOSTUB_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PROTOSTUB_LOG_FILE", raising=False)
    return CliRunner()


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "generate service stubs" in result.output
        for option in ("--proto", "--recursive", "--out", "--writer"):
            assert option in result.output

    def test_short_help(self, runner):
        result = runner.invoke(cli, ["-h"])
        assert result.exit_code == 0
        assert "-p, --proto" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_unknown_option(self, runner):
        result = runner.invoke(cli, ["--language", "java"])
        assert result.exit_code == 2

    def test_missing_proto(self, runner, tmp_path):
        result = runner.invoke(cli, ["-o", str(tmp_path / "out")])
        assert result.exit_code == 2
        assert "Missing option '-p' / '--proto'" in result.output

    def test_missing_out(self, runner, proto_dir):
        result = runner.invoke(cli, ["-p", str(proto_dir)])
        assert result.exit_code == 2
        assert "Missing option '-o' / '--out'" in result.output


class TestGenerate:
    def test_generate_folder(self, runner, proto_dir, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(cli, ["-p", str(proto_dir), "-o", str(out)])
        assert result.exit_code == 0
        assert "PythonServiceWriter" in result.output
        assert "generated" in result.output
        assert (out / "greeter_service.py").is_file()
        assert not (out / "nested").exists()

    def test_generate_recursive(self, runner, proto_dir, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(cli, ["--proto", str(proto_dir), "--out", str(out), "--recursive"])
        assert result.exit_code == 0
        assert (out / "nested" / "deep_api_service.py").is_file()

    def test_generate_with_named_writer(self, runner, proto_dir, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(
            cli, ["-p", str(proto_dir / "greeter.proto"), "-o", str(out), "-w", "PythonServiceWriter"],
        )
        assert result.exit_code == 0
        assert (out / "greeter_service.py").is_file()

    def test_rerun_leaves_files(self, runner, proto_dir, tmp_path):
        out = tmp_path / "out"
        runner.invoke(cli, ["-p", str(proto_dir), "-o", str(out)])
        (out / "greeter_service.py").write_text("# edited\n")

        result = runner.invoke(cli, ["-p", str(proto_dir), "-o", str(out)])
        assert result.exit_code == 0
        assert "exists" in result.output
        assert (out / "greeter_service.py").read_text() == "# edited\n"

    def test_parse_error_still_exits_zero(self, runner, write_proto, tmp_path):
        root = tmp_path / "protos"
        write_proto(root / "bad.proto", "service {")
        result = runner.invoke(cli, ["-p", str(root), "-o", str(tmp_path / "out")])
        assert result.exit_code == 0
        assert "parse error" in result.output

    def test_unknown_writer(self, runner, proto_dir, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(cli, ["-p", str(proto_dir), "-o", str(out), "-w", "JavaWriter"])
        assert result.exit_code == 1
        assert "Can not find service writer. Writer class: JavaWriter" in result.output
        assert not out.exists()

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(cli, ["-p", str(tmp_path / "nope"), "-o", str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "Can not find file or folder by path" in result.output

    def test_output_is_file(self, runner, proto_dir, tmp_path):
        out = tmp_path / "out.txt"
        out.write_text("x")
        result = runner.invoke(cli, ["-p", str(proto_dir), "-o", str(out)])
        assert result.exit_code == 1
        assert "Output path is file" in result.output


class TestJsonOutput:
    def test_report(self, runner, proto_dir, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(cli, ["-q", "--json", "-p", str(proto_dir), "-o", str(out)])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["writer"] == "PythonServiceWriter"
        assert data["report"]["counts"] == {"no_services": 1, "generated": 1}

    def test_error(self, runner, tmp_path):
        result = runner.invoke(
            cli, ["-q", "--json", "-p", str(tmp_path / "nope"), "-o", str(tmp_path / "out")],
        )
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"].startswith("Can not find file or folder")


class TestListWriters:
    def test_list(self, runner):
        result = runner.invoke(cli, ["--list-writers"])
        assert result.exit_code == 0
        assert "PythonServiceWriter (default)" in result.output

    def test_list_json(self, runner):
        result = runner.invoke(cli, ["-l", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["PythonServiceWriter"]["module"] == "protostub.adapters.writers.python"


class TestConfigDefaults:
    def _write_config(self, directory: Path, body: str) -> Path:
        path = directory / "protostub.yml"
        path.write_text(body)
        return path

    def test_defaults_from_auto_detected_config(self, runner, proto_dir, tmp_path):
        self._write_config(Path.cwd(), f"proto: {proto_dir}\nout: generated\nrecursive: true\n")
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert (Path.cwd() / "generated" / "nested" / "deep_api_service.py").is_file()

    def test_flags_override_config(self, runner, proto_dir, tmp_path):
        config = self._write_config(tmp_path, f"proto: {proto_dir}\nout: from-config\n")
        out = tmp_path / "from-flag"
        result = runner.invoke(cli, ["-c", str(config), "-o", str(out)])
        assert result.exit_code == 0
        assert (out / "greeter_service.py").is_file()
        assert not (tmp_path / "from-config").exists()

    def test_no_recursive_overrides_config(self, runner, proto_dir, tmp_path):
        config = self._write_config(tmp_path, f"proto: {proto_dir}\nout: out\nrecursive: true\n")
        result = runner.invoke(cli, ["-c", str(config), "--no-recursive"])
        assert result.exit_code == 0
        assert (tmp_path / "out" / "greeter_service.py").is_file()
        assert not (tmp_path / "out" / "nested").exists()

    def test_recursive_flag_overrides_config(self, runner, proto_dir, tmp_path):
        config = self._write_config(tmp_path, f"proto: {proto_dir}\nout: out\nrecursive: false\n")
        result = runner.invoke(cli, ["-c", str(config), "-r"])
        assert result.exit_code == 0
        assert (tmp_path / "out" / "nested" / "deep_api_service.py").is_file()

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["-c", str(tmp_path / "nope.yml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_invalid_config(self, runner, tmp_path):
        config = self._write_config(tmp_path, "language: java\n")
        result = runner.invoke(cli, ["-c", str(config)])
        assert result.exit_code == 1
        assert "Invalid generator configuration" in result.output
