"""End-to-end flows over the store, interpreter and detector."""

from .voice_flow import (
    FlowOutcome,
    FlowStatus,
    Notice,
    delete_entry,
    refresh,
    submit_manual_entry,
    submit_transcript,
    update_entry,
)

__all__ = [
    "FlowOutcome",
    "FlowStatus",
    "Notice",
    "delete_entry",
    "refresh",
    "submit_manual_entry",
    "submit_transcript",
    "update_entry",
]
