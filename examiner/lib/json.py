from __future__ import annotations

import base64
import datetime
import decimal
import enum
import json as pyjson
import pathlib
import typing as t

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


# encoders
def encode_bytes(obj: bytes) -> str:
    return base64.b64encode(obj).decode("utf8")


def encode_set(obj: set[t.Any]) -> list[t.Any]:
    return list(obj)


def encode_datetime(obj: datetime.date) -> str:
    return obj.isoformat()


def encode_decimal(obj: decimal.Decimal) -> str:
    return str(obj)


def encode_enum(obj: enum.Enum) -> JSONValue:
    return obj.value


def encode_path(obj: pathlib.Path) -> str:
    return str(obj)


def encode_pydantic(obj: p.BaseModel) -> dict[str, JSONValue]:
    return obj.model_dump(mode="json")


def encode_timedelta(obj: datetime.timedelta) -> float:
    return obj.total_seconds()


ENCODERS: dict[type, t.Callable[[t.Any], JSONValue]] = {
    bytes: encode_bytes,
    # datetime.datetime is a subclass of datetime.date
    datetime.date: encode_datetime,
    datetime.timedelta: encode_timedelta,
    decimal.Decimal: encode_decimal,
    enum.Enum: encode_enum,
    pathlib.Path: encode_path,
    set: encode_set,
}


# stdlib-compatible JSON encoder
class JSONEncoder(pyjson.JSONEncoder):
    def get_encoders(self) -> dict[type, t.Callable[[t.Any], JSONValue]]:
        return ENCODERS

    def default(self, o: t.Any) -> JSONValue:
        if isinstance(o, p.BaseModel):
            return encode_pydantic(o)

        for tp, encoder in self.get_encoders().items():
            if isinstance(o, tp):
                return encoder(o)

        return pyjson.JSONEncoder.default(self, o)


def dumps(obj: t.Any, *, cls: type[pyjson.JSONEncoder] = JSONEncoder, **kw: t.Any) -> str:
    return pyjson.dumps(obj, cls=cls, **kw)


def loads(s: str | bytes | bytearray, **kw: t.Any) -> t.Any:
    """implemented for parity's sake"""
    return pyjson.loads(s, **kw)
