"""
Query Result Model

Typed form of a metrics backend query response and of the webhook payload a
reader POSTs.

Wire shape::

    {
        "status": "success",
        "data": {
            "resultType": "vector" | "matrix",
            "result": [...]
        },
        "context": "..."
    }

Decoding is two-phase. The body is first decoded generically, keeping every
numeric token as its original decimal text (``Number``), then each entry of
``data.result`` is dispatched on ``resultType``:

- ``vector``: entries become ``Sample`` (``metric`` + one ``[ts, value]`` pair)
- ``matrix``: entries become ``Series`` (``metric`` + a list of pairs)

Any other ``resultType`` with entries present is rejected. A result list
never mixes the two shapes.

Numbers are never routed through binary floating point, so 19-digit
nanosecond timestamps survive a decode/encode cycle byte-for-byte.
"""

from __future__ import annotations

import dataclasses
import json
import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import orjson

from promql_trigger.core.config.constants import ResultType
from promql_trigger.core.exceptions import ResultDecodeError

_NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_SPECIAL_VALUES = frozenset({"NaN", "+Inf", "-Inf", "Inf"})
_JSON_CONSTANTS = {"NaN": "NaN", "Infinity": "+Inf", "-Infinity": "-Inf"}


class Number(str):
    """
    A numeric token kept as its decimal text.

    Accepts JSON number text, Python ints and floats, and the special
    values ``NaN``, ``+Inf`` and ``-Inf`` that the backend emits as
    strings. Conversion to a numeric type happens only on request.

    Example:
        >>> ts = Number("1535779665000000000")
        >>> ts.to_int()
        1535779665000000000
    """

    __slots__ = ()

    def __new__(cls, token: str | int | float) -> Number:
        if isinstance(token, Number):
            return token
        if isinstance(token, bool):
            raise ValueError(f"invalid number: {token!r}")
        if isinstance(token, int):
            text = str(token)
        elif isinstance(token, float):
            if math.isnan(token):
                text = "NaN"
            elif math.isinf(token):
                text = "+Inf" if token > 0 else "-Inf"
            else:
                text = repr(token)
        elif isinstance(token, str):
            text = token
        else:
            raise TypeError(f"cannot build a Number from {type(token).__name__}")

        if not (_NUMBER_RE.fullmatch(text) or text in _SPECIAL_VALUES):
            raise ValueError(f"invalid number: {token!r}")
        return super().__new__(cls, text)

    def __repr__(self) -> str:
        return f"Number({str.__repr__(self)})"

    @property
    def is_special(self) -> bool:
        """True for NaN and the infinities, which have no JSON number form."""
        return str(self) in _SPECIAL_VALUES

    def to_decimal(self) -> Decimal:
        return Decimal(str(self).replace("Inf", "Infinity"))

    def to_int(self) -> int:
        """
        Exact integer value.

        Raises:
            ValueError: If the token has a fractional part or is special
        """
        value = self.to_decimal()
        if not value.is_finite() or value != value.to_integral_value():
            raise ValueError(f"{self} is not an integer")
        return int(value)

    def to_float(self) -> float:
        return float(self.to_decimal())


def _decode_number(token: Any, where: str) -> Number:
    try:
        return Number(token)
    except (TypeError, ValueError) as e:
        raise ResultDecodeError(
            f"invalid numeric token in {where}: {token!r}",
            details={"token": repr(token)},
        ) from e


def _decode_pair(raw: Any, where: str) -> tuple[Number, Number]:
    if not isinstance(raw, list) or len(raw) != 2:
        raise ResultDecodeError(
            f"{where} must be a [timestamp, value] pair",
            details={"value": repr(raw)},
        )
    return _decode_number(raw[0], where), _decode_number(raw[1], where)


def _is_text(value: Any) -> bool:
    # Numbers decode as Number, which is a str subclass
    return isinstance(value, str) and not isinstance(value, Number)


def _decode_metric(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict) or not all(_is_text(v) for v in raw.values()):
        raise ResultDecodeError(
            "metric must be an object of string labels",
            details={"metric": repr(raw)},
        )
    return dict(raw)


def _encode_number(number: Number) -> Any:
    if number.is_special:
        return str(number)
    return orjson.Fragment(str(number))


@dataclass(frozen=True)
class Sample:
    """One series at one instant (``resultType: vector``)."""

    metric: dict[str, str]
    value: tuple[Number, Number]

    @property
    def timestamp(self) -> Number:
        return self.value[0]

    @classmethod
    def from_raw(cls, raw: Any) -> Sample:
        if not isinstance(raw, dict):
            raise ResultDecodeError("vector entry must be an object", details={"entry": repr(raw)})
        return cls(metric=_decode_metric(raw.get("metric")), value=_decode_pair(raw.get("value"), "value"))

    def to_raw(self) -> dict[str, Any]:
        return {"metric": self.metric, "value": [_encode_number(n) for n in self.value]}


@dataclass(frozen=True)
class Series:
    """One series over a time range (``resultType: matrix``)."""

    metric: dict[str, str]
    values: tuple[tuple[Number, Number], ...] = ()

    @classmethod
    def from_raw(cls, raw: Any) -> Series:
        if not isinstance(raw, dict):
            raise ResultDecodeError("matrix entry must be an object", details={"entry": repr(raw)})
        values = raw.get("values")
        if values is None:
            values = []
        if not isinstance(values, list):
            raise ResultDecodeError("values must be a list", details={"values": repr(values)})
        return cls(
            metric=_decode_metric(raw.get("metric")),
            values=tuple(_decode_pair(pair, "values") for pair in values),
        )

    def to_raw(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "values": [[_encode_number(n) for n in pair] for pair in self.values],
        }


_DECODERS = {
    ResultType.VECTOR.value: Sample.from_raw,
    ResultType.MATRIX.value: Series.from_raw,
}


@dataclass(frozen=True)
class QueryResult:
    """
    Decoded query response.

    ``context`` is not produced by the backend; readers set it from their
    registered query before delivery.
    """

    status: str = ""
    result_type: str = ""
    result: tuple[Sample | Series, ...] = field(default_factory=tuple)
    context: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.result

    def with_context(self, context: str) -> QueryResult:
        return dataclasses.replace(self, context=context)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"resultType": self.result_type}
        if self.result:
            data["result"] = [entry.to_raw() for entry in self.result]
        return {"status": self.status, "data": data, "context": self.context}

    def to_json(self) -> bytes:
        """Serialize with numeric tokens written back as bare JSON numbers."""
        return orjson.dumps(self.to_dict())


def decode_query_result(raw: bytes | str) -> QueryResult:
    """
    Decode a query response body into a ``QueryResult``.

    Raises:
        ResultDecodeError: If the body is not JSON, is not an object, or
            its result entries do not match ``resultType``
    """
    try:
        document = json.loads(
            raw,
            parse_int=Number,
            parse_float=Number,
            parse_constant=lambda name: Number(_JSON_CONSTANTS[name]),
        )
    except ValueError as e:
        raise ResultDecodeError.from_exception(e, message=f"invalid query result JSON: {e}") from e

    if not isinstance(document, dict):
        raise ResultDecodeError("query result must be a JSON object")

    data = document.get("data") or {}
    if not isinstance(data, dict):
        raise ResultDecodeError("data must be an object")

    result_type = data.get("resultType") or ""
    if not _is_text(result_type):
        raise ResultDecodeError("data.resultType must be a string")
    entries = data.get("result") or []
    if not isinstance(entries, list):
        raise ResultDecodeError("data.result must be a list", details={"result_type": result_type})

    decoder = _DECODERS.get(result_type)
    if entries and decoder is None:
        raise ResultDecodeError(
            f"unknown ResultType: {result_type}",
            details={"result_type": result_type},
        )

    return QueryResult(
        status=str(document.get("status") or ""),
        result_type=str(result_type),
        result=tuple(decoder(entry) for entry in entries) if entries else (),
        context=str(document.get("context") or ""),
    )
