# Overview: Document numbering for ledger entries, receipts, returns and sessions.

from __future__ import annotations

from ..domain import StoreState


def next_document_number(state: StoreState, document_type: str, prefix: str) -> str:
    """
    Next sequential id for a document type, e.g. "L-000042".

    Counters live in the snapshot (state.sequences) so ids stay unique
    across restarts. Callers hold the processor lock.
    """
    value = int(state.sequences.get(document_type, 0)) + 1
    state.sequences[document_type] = value
    return f"{prefix}-{value:06d}"


def ensure_unique_id(existing_ids, proposed: str | None, state: StoreState, document_type: str, prefix: str) -> str:
    """Use the caller's id when given, otherwise number one; never reuse."""
    if proposed:
        return proposed
    ids = set(existing_ids)
    while True:
        candidate = next_document_number(state, document_type, prefix)
        if candidate not in ids:
            return candidate
