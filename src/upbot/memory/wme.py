"""
Working-memory elements (WMEs) - named, typed sensor attributes.

An alternative input format to the plain sensor string:

    "right_bump:i:0;wall:i:1;ir:i:0;label:s:dock"

Each element is attr:type:value with type one of i (int), c (char),
d (real) or s (text). WMEs are mapped onto the fixed sensor schema by
attribute name, so both input formats feed the same engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np

from upbot.errors import MalformedInput

from .schema import SensorSchema

WmeValue = Union[int, str, float]


class WmeKind(Enum):
    """Type tag of a WME value."""

    INT = "i"
    CHAR = "c"
    REAL = "d"
    TEXT = "s"


@dataclass(frozen=True)
class Wme:
    attr: str
    kind: WmeKind
    value: WmeValue

    @classmethod
    def parse(cls, text: str) -> Wme:
        parts = text.split(":", 2)
        if len(parts) != 3 or not parts[0]:
            raise MalformedInput(f"WME must look like attr:type:value, got {text!r}")
        attr, tag, raw = parts
        try:
            kind = WmeKind(tag)
        except ValueError as e:
            raise MalformedInput(f"unknown WME type {tag!r} for {attr}") from e

        try:
            if kind is WmeKind.INT:
                value = int(raw)
            elif kind is WmeKind.REAL:
                value = float(raw)
            elif kind is WmeKind.CHAR:
                if len(raw) != 1:
                    raise ValueError(raw)
                value = raw
            else:
                value = raw
        except ValueError as e:
            raise MalformedInput(f"bad {kind.name.lower()} value {raw!r} for {attr}") from e
        return cls(attr, kind, value)


class WmeSet:
    """
    Parsed WME string with typed accessors.

    Usage:
        wmes = WmeSet.parse("wall:i:1;ir:i:0")
        wmes.get_int("wall")        # 1
        wmes.to_vector(schema)      # fixed-layout sensor vector
    """

    def __init__(self, wmes: list[Wme]):
        self._by_attr: dict[str, Wme] = {}
        for wme in wmes:
            if wme.attr in self._by_attr:
                raise MalformedInput(f"duplicate WME attribute {wme.attr}")
            self._by_attr[wme.attr] = wme

    @classmethod
    def parse(cls, wme_string: str) -> WmeSet:
        if not isinstance(wme_string, str):
            raise MalformedInput("WME data must be a string")
        items = [item.strip() for item in wme_string.split(";")]
        return cls([Wme.parse(item) for item in items if item])

    def __len__(self) -> int:
        return len(self._by_attr)

    def __contains__(self, attr: str) -> bool:
        return attr in self._by_attr

    def _get(self, attr: str, kind: WmeKind) -> WmeValue:
        wme = self._by_attr[attr]
        if wme.kind is not kind:
            raise TypeError(f"{attr} is {wme.kind.name.lower()}, not {kind.name.lower()}")
        return wme.value

    def get_int(self, attr: str) -> int:
        return self._get(attr, WmeKind.INT)

    def get_char(self, attr: str) -> str:
        return self._get(attr, WmeKind.CHAR)

    def get_real(self, attr: str) -> float:
        return self._get(attr, WmeKind.REAL)

    def get_text(self, attr: str) -> str:
        return self._get(attr, WmeKind.TEXT)

    def to_vector(self, schema: SensorSchema) -> np.ndarray:
        """
        Lay the WMEs out in schema order.

        Raises:
            MalformedInput: an attribute is missing or not in the schema.
        """
        unknown = set(self._by_attr) - set(schema.names)
        if unknown:
            raise MalformedInput(f"WME attributes not in schema: {sorted(unknown)}")
        missing = [name for name in schema.names if name not in self._by_attr]
        if missing:
            raise MalformedInput(f"WME input missing attributes: {missing}")

        values = [self._by_attr[name].value for name in schema.names]
        if all(self._by_attr[name].kind is WmeKind.INT for name in schema.names):
            return np.array(values, dtype=np.int64)
        return np.array(values, dtype=object)
