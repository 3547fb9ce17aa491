# src/atlas_converge/core/catalog/schedule.py
"""
Janelas de manutenção de recursos.

Um recurso pode declarar um `Schedule`; fora da janela ele é pulado pela
transação (a menos que `ignore_schedules` esteja ativo).

Formato da faixa horária: "HH:MM - HH:MM" (ou "HH - HH"). Faixas que
atravessam a meia-noite (ex.: "22:00 - 02:00") são suportadas. Os limites
são inclusivos.

Limites explícitos:
    - Períodos baseados na última sincronização (hourly/daily/repeat) exigem
      estado persistido e não são suportados
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time
from typing import FrozenSet, Iterable, Optional, Tuple, Union


_WEEKDAYS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}

_TIME_RE = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?\s*$")


def _parse_time(text: str) -> time:
    m = _TIME_RE.match(text)
    if not m:
        raise ValueError(f"Invalid schedule time: {text!r}")
    hour, minute, second = (int(g) if g else 0 for g in m.groups())
    return time(hour, minute, second)


def parse_range(text: str) -> Tuple[time, time]:
    """Converte "HH:MM - HH:MM" em um par (início, fim)."""
    parts = text.split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid schedule range: {text!r}")
    return _parse_time(parts[0]), _parse_time(parts[1])


def parse_weekdays(values: Iterable[Union[str, int]]) -> FrozenSet[int]:
    days = set()
    for v in values:
        if isinstance(v, int):
            if not 0 <= v <= 6:
                raise ValueError(f"Invalid weekday: {v}")
            days.add(v)
            continue
        key = str(v).strip().lower()
        if key not in _WEEKDAYS:
            raise ValueError(f"Invalid weekday: {v!r}")
        days.add(_WEEKDAYS[key])
    return frozenset(days)


@dataclass(frozen=True)
class Schedule:
    """Janela de manutenção: faixa horária e/ou dias da semana (0 = segunda)."""

    name: str
    range: Optional[Tuple[time, time]] = None
    weekdays: Optional[FrozenSet[int]] = None

    @classmethod
    def from_spec(
        cls,
        name: str,
        *,
        range: Optional[str] = None,
        weekday: Optional[Iterable[Union[str, int]]] = None,
    ) -> "Schedule":
        return cls(
            name=name,
            range=parse_range(range) if range else None,
            weekdays=parse_weekdays(weekday) if weekday is not None else None,
        )

    def matches(self, now: datetime) -> bool:
        if self.weekdays is not None and now.weekday() not in self.weekdays:
            return False
        if self.range is None:
            return True

        start, end = self.range
        current = now.time().replace(microsecond=0, tzinfo=None)
        if start <= end:
            return start <= current <= end
        # atravessa a meia-noite
        return current >= start or current <= end
