from __future__ import annotations

import traceback

from rollbar_reporter.models.schemas import ExceptionInfo, StackFrame, Trace


def frames_from_exception(exc: BaseException) -> list[StackFrame]:
    """Stack frames of the exception's traceback, oldest call first."""
    frames: list[StackFrame] = []
    for summary in traceback.extract_tb(exc.__traceback__):
        frames.append(
            StackFrame(
                filename=summary.filename or "unknown_file_name",
                lineno=summary.lineno,
                colno=getattr(summary, "colno", None),
                method=summary.name,
                code=summary.line or None,
            )
        )
    return frames


def trace_from_exception(exc: BaseException) -> Trace:
    return Trace(
        frames=frames_from_exception(exc),
        exception=ExceptionInfo(class_=type(exc).__name__, message=str(exc)),
    )


def exception_chain(exc: BaseException) -> list[BaseException]:
    """Follow explicit causes and implicit contexts, outermost exception first."""
    chain: list[BaseException] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current)
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None
    return chain


def traces_from_exception(exc: BaseException) -> list[Trace]:
    return [trace_from_exception(item) for item in exception_chain(exc)]
