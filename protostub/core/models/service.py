"""
Service model — the language-agnostic view of a proto service.

Built by the extractor from a parsed proto file and handed to writer
plugins. Writers only read these models; nothing mutates them after
extraction.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MethodDescription(BaseModel):
    """One ``rpc`` declaration inside a service.

    Request and response types are the raw type references as written
    in the proto source (``HelloRequest``, ``.pkg.Reply``). They are not
    resolved or validated.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    request_type: str
    response_type: str
    comments: tuple[str, ...] = ()   # leading comment lines, source order


class ServiceDescription(BaseModel):
    """A ``service`` block and its methods in declaration order.

    Duplicate method names are kept as declared; writers that care
    about uniqueness must handle it themselves.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    methods: tuple[MethodDescription, ...] = ()

    @property
    def method_names(self) -> list[str]:
        return [m.name for m in self.methods]
