"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from pathlib import Path

import pytest

GREETER_PROTO = textwrap.dedent("""\
    syntax = "proto3";

    package demo.greet;

    import "google/protobuf/empty.proto";

    option java_package = "com.example.greet";

    // Greeting service.
    service Greeter {
      // Says hello.
      rpc SayHello (HelloRequest) returns (HelloResponse);

      /* Says goodbye. */
      rpc SayGoodbye(.demo.greet.ByeRequest) returns (google.protobuf.Empty) {}
    }

    message HelloRequest {
      string name = 1;
      map<string, int32> tags = 2 [deprecated = true];
      message Inner { enum Kind { A = 0; } }
    }

    message HelloResponse { string greeting = 1; }
""")

NO_SERVICE_PROTO = textwrap.dedent("""\
    syntax = "proto3";

    message Lonely {
      string name = 1;
    }
""")


@pytest.fixture
def write_proto():
    """Write a proto file (creating parent folders) and return its path."""

    def _write(path: Path, content: str = GREETER_PROTO) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def proto_dir(tmp_path: Path, write_proto) -> Path:
    """A proto folder with a nested layout.

    protos/
      greeter.proto
      empty.proto          (no services)
      nested/
        deep-api.proto
    """
    root = tmp_path / "protos"
    write_proto(root / "greeter.proto")
    write_proto(root / "empty.proto", NO_SERVICE_PROTO)
    write_proto(
        root / "nested" / "deep-api.proto",
        'syntax = "proto3";\nservice Deep { rpc Dive (Depth) returns (Depth); }\n',
    )
    return root


@pytest.fixture
def greeter_text() -> str:
    """Proto source with one two-method service, messages and comments."""
    return GREETER_PROTO


@pytest.fixture
def no_service_text() -> str:
    """Proto source without any service block."""
    return NO_SERVICE_PROTO


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo the root logger changes made by ``setup_logging``."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
