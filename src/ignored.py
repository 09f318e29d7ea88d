from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from src.config import ignored_commercial_names
from src.text import norm_key


class IgnoreList:
    """
    Colaboradores que não devem ser considerados nos acionamentos.

    Em alguns pontos o nome aparece só como primeiro nome, então além do nome
    completo também ignoramos pelo primeiro token.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._full = {norm_key(n) for n in names if norm_key(n)}
        self._first = {n.split(" ")[0] for n in self._full}

    def __contains__(self, name: object) -> bool:
        key = norm_key(str(name or ""))
        if not key:
            return False
        return key in self._full or key.split(" ")[0] in self._first

    def __len__(self) -> int:
        return len(self._full)

    def __repr__(self) -> str:
        return f"IgnoreList({sorted(self._full)!r})"


@lru_cache(maxsize=1)
def default_ignore_list() -> IgnoreList:
    return IgnoreList(ignored_commercial_names())


def is_ignored_commercial(name: str, ignored: IgnoreList | None = None) -> bool:
    return name in (ignored if ignored is not None else default_ignore_list())
