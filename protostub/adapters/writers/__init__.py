"""Bundled writers — target-language stub emitters."""

from protostub.adapters.writers.python import PythonServiceWriter

__all__ = ["PythonServiceWriter"]
