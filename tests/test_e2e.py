"""
End-to-end integration tests — full lifecycle through the CLI.

Tests the complete workflow: configure → generate → edit → regenerate.
Uses Click's CliRunner so everything runs in-process.
"""

from __future__ import annotations

import ast
import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from protostub.main import cli


@pytest.fixture()
def project_dir(tmp_path: Path, write_proto, monkeypatch) -> Path:
    """Create a realistic project with a proto tree and a config file."""
    (tmp_path / "protostub.yml").write_text(textwrap.dedent("""\
        protostub:
          proto: api
          out: generated
          recursive: true
    """))

    write_proto(tmp_path / "api" / "greeter.proto")
    write_proto(tmp_path / "api" / "billing" / "invoices.proto", textwrap.dedent("""\
        syntax = "proto3";
        package billing;

        import "google/protobuf/timestamp.proto";

        service Invoices {
          option deprecated = false;

          // Fetch one invoice.
          rpc GetInvoice (GetInvoiceRequest) returns (Invoice);
          rpc ListInvoices (ListInvoicesRequest) returns (ListInvoicesResponse) {
            option idempotency_level = NO_SIDE_EFFECTS;
          }
          rpc Watch (WatchRequest) returns (stream Invoice);
        }

        service Payments {
          rpc Pay (PayRequest) returns (.billing.Receipt);
        }

        message Invoice {
          string id = 1;
          google.protobuf.Timestamp issued = 2;
          oneof target { string email = 3; string phone = 4; }
        }
    """))
    write_proto(tmp_path / "api" / "common" / "types.proto", 'syntax = "proto3";\nmessage Money { int64 cents = 1; }\n')
    (tmp_path / "api" / "README.md").write_text("# API protos\n")

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PROTOSTUB_LOG_LEVEL", raising=False)
    return tmp_path


class TestFullLifecycle:
    def test_generate_from_config(self, project_dir: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "--json"])
        assert result.exit_code == 0, result.output

        report = json.loads(result.stdout)["report"]
        statuses = {Path(f["input"]).name: f["status"] for f in report["files"]}
        assert statuses == {
            "README.md": "parse_error",
            "invoices.proto": "generated",
            "types.proto": "no_services",
            "greeter.proto": "generated",
        }

        out = project_dir / "generated"
        assert (out / "greeter_service.py").is_file()
        assert (out / "billing" / "invoices_service.py").is_file()
        assert not (out / "common").exists()

    def test_generated_code_is_valid_python(self, project_dir: Path):
        CliRunner().invoke(cli, [])
        source = (project_dir / "generated" / "billing" / "invoices_service.py").read_text()

        module = ast.parse(source)
        classes = [n for n in module.body if isinstance(n, ast.ClassDef)]
        assert [c.name for c in classes] == ["InvoicesService", "PaymentsService"]

        invoices = classes[0]
        methods = [n.name for n in invoices.body if isinstance(n, ast.FunctionDef)]
        assert methods == ["__init__", "GetInvoice", "ListInvoices"]
        assert ast.get_docstring(invoices.body[1]) == "Fetch one invoice."
        assert "router.__get__connection(PaymentsService, importStub.PaymentsStub)" in source

    def test_regenerate_keeps_edits_and_adds_new_files(self, project_dir: Path, write_proto):
        runner = CliRunner()
        runner.invoke(cli, [])

        greeter_out = project_dir / "generated" / "greeter_service.py"
        greeter_out.write_text(greeter_out.read_text() + "# hand edit\n")
        edited = greeter_out.read_text()

        write_proto(
            project_dir / "api" / "extra.proto",
            "service Extra { rpc Go (A) returns (B); }",
        )
        result = runner.invoke(cli, ["-q", "--json"])
        assert result.exit_code == 0

        counts = json.loads(result.stdout)["report"]["counts"]
        assert counts["generated"] == 1
        assert counts["exists"] == 2
        assert greeter_out.read_text() == edited
        assert (project_dir / "generated" / "extra_service.py").is_file()

    def test_single_file_override(self, project_dir: Path, tmp_path: Path):
        out = tmp_path / "single"
        result = CliRunner().invoke(
            cli, ["-p", str(project_dir / "api" / "billing" / "invoices.proto"), "-o", str(out)],
        )
        assert result.exit_code == 0
        assert (out / "invoices_service.py").is_file()
        assert not (out / "greeter_service.py").exists()
