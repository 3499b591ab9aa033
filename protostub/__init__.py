"""protostub — generate client service stubs from proto3 service declarations."""

__version__ = "0.1.0"
