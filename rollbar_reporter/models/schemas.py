from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

Level = Literal["critical", "error", "warning", "info", "debug"]
Json = Any


class StackFrame(BaseModel):
    filename: str = "unknown_file_name"
    lineno: int | None = None
    colno: int | None = None
    method: str | None = None
    code: str | None = None


class ExceptionInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    class_: str = Field(alias="class")
    message: str | None = None
    description: str | None = None


class Trace(BaseModel):
    # Most recent call last.
    frames: list[StackFrame]
    exception: ExceptionInfo


class Message(BaseModel):
    model_config = ConfigDict(extra="allow")

    body: str


class Telemetry(BaseModel):
    level: Level
    type: Literal["log", "network", "dom", "navigation", "error", "manual"]
    source: Literal["client", "server"]
    timestamp_ms: int
    body: dict[str, Json] = Field(default_factory=dict)


class TraceBody(BaseModel):
    trace: Trace
    telemetry: list[Telemetry] | None = None


class TraceChainBody(BaseModel):
    # Outermost exception first.
    trace_chain: list[Trace]
    telemetry: list[Telemetry] | None = None


class MessageBody(BaseModel):
    message: Message
    telemetry: list[Telemetry] | None = None


Body = TraceBody | TraceChainBody | MessageBody


class RequestSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    method: str
    headers: dict[str, str]
    params: dict[str, str] = Field(default_factory=dict)
    GET: dict[str, str] = Field(default_factory=dict)
    query_string: str = ""
    POST: Json | None = None
    body: str | None = None
    user_ip: str | None = None

    @model_serializer(mode="wrap")
    def _keep_null_post(self, handler: SerializerFunctionWrapHandler) -> dict[str, Json]:
        # A decoded JSON body of `null` is still a body; only an unset POST is omitted.
        data = handler(self)
        if self.POST is None and "POST" in self.model_fields_set:
            data["POST"] = None
        return data


class Person(BaseModel):
    id: str
    username: str | None = None
    email: str | None = None


class Server(BaseModel):
    cpu: str | None = None
    host: str | None = None
    root: str | None = None
    branch: str | None = None
    code_version: str | None = None


class Notifier(BaseModel):
    name: str | None = None
    version: str | None = None


class ReportTemplate(BaseModel):
    """Item metadata fixed when a reporter is constructed."""

    environment: str
    code_version: str | None = None
    platform: str | None = None
    language: str | None = None
    framework: str | None = None
    context: str | None = None
    person: Person | None = None
    server: Server | None = None
    custom: dict[str, Json] | None = None
    fingerprint: str | None = None
    title: str | None = None
    uuid: str | None = None
    notifier: Notifier | None = None


class Data(ReportTemplate):
    body: Body
    level: Level | None = None
    timestamp: int | None = None
    request: RequestSnapshot | None = None


class Payload(BaseModel):
    data: Data

    def to_wire(self) -> dict[str, Json]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
