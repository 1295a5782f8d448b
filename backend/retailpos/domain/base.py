from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping

from ..validation import InvalidArgumentError


class Record:
    """
    Mixin for the snapshot dataclasses.

    to_dict/from_dict are exact inverses so the persisted blob round-trips.
    Subclasses list nested record fields in `_nested` (field name -> record type);
    those fields hold either a single record or a list of records.
    """

    _nested: dict = {}

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                value = [v.to_dict() if isinstance(v, Record) else v for v in value]
            elif isinstance(value, dict):
                value = dict(value)
            elif isinstance(value, Record):
                value = value.to_dict()
            out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        if isinstance(data, cls):
            # Copy so callers never hold a live reference into store state
            data = data.to_dict()
        if not isinstance(data, Mapping):
            raise InvalidArgumentError(f"{cls.__name__} must be an object")

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known:
                continue
            nested = cls._nested.get(key)
            if nested is not None and value is not None:
                if isinstance(value, list):
                    value = [nested.from_dict(v) for v in value]
                else:
                    value = nested.from_dict(value)
            elif isinstance(value, list):
                value = list(value)
            kwargs[key] = value

        try:
            return cls(**kwargs)
        except TypeError as exc:
            raise InvalidArgumentError(f"Invalid {cls.__name__}: {exc}") from exc
