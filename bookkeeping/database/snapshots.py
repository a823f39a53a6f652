# bookkeeping/database/snapshots.py
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Sequence, Tuple

Records = Sequence[Mapping[str, Any]]


@dataclass(frozen=True)
class Snapshots:
    """Point-in-time bundle of every collection, as handed to the report builders."""

    sales: Records = ()
    clients: Records = ()
    products: Records = ()
    supplies: Records = ()
    debts: Records = ()
    expenses: Records = ()
    categories: Records = ()
    bankDeposits: Records = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Records]) -> "Snapshots":
        names = {f.name for f in fields(cls)}
        return cls(**{k: tuple(v or ()) for k, v in data.items() if k in names})

    def counts(self) -> Tuple[Tuple[str, int], ...]:
        return tuple((f.name, len(getattr(self, f.name))) for f in fields(self))
