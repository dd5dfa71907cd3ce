"""Region record value type and wire decoding."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import MalformedResponseError


@dataclass(slots=True, frozen=True)
class RegionalRecord:
    """One hierarchy node: opaque code plus display name."""

    code: str | None
    name: str | None

    @property
    def is_complete(self) -> bool:
        return bool(self.code) and bool(self.name)


class WireRecord(BaseModel):
    """Shape of one element in the remote JSON array."""

    model_config = ConfigDict(extra="ignore")

    code: str | None = Field(default=None, validation_alias=AliasChoices("kode", "code"))
    name: str | None = Field(default=None, validation_alias=AliasChoices("nama", "name"))

    def to_record(self) -> RegionalRecord:
        return RegionalRecord(code=self.code, name=self.name)


_WIRE_LIST = TypeAdapter(list[WireRecord])


def decode_records(payload: bytes | str) -> list[RegionalRecord]:
    """Decode a JSON array payload into records, preserving order."""

    try:
        items = _WIRE_LIST.validate_json(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Response is not a list of region records: {exc.error_count()} error(s)"
        ) from exc
    return [item.to_record() for item in items]


__all__ = ["RegionalRecord", "WireRecord", "decode_records"]
