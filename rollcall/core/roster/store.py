from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Optional, Tuple

from rollcall.core.errors import NotFoundError
from rollcall.core.identity.models import Person


PersonPredicate = Callable[[Person], bool]


def _sort_key(p: Person) -> Tuple[str, str]:
    return (p.name.casefold(), p.client_id)


class RosterStore:
    """
    People indexed by client id.

    - insert is last-write-wins on the client id
    - enumeration is sorted by (name, client id), recomputed per call
    - removals of missing records are no-ops
    """

    def __init__(self) -> None:
        self._by_cid: Dict[str, Person] = {}

    def insert(self, person: Person) -> Person:
        self._by_cid[person.client_id] = person
        return person

    def find_by_client_id(self, cid: str) -> Optional[Person]:
        return self._by_cid.get(str(cid))

    def get_by_client_id(self, cid: str) -> Person:
        p = self.find_by_client_id(cid)
        if p is None:
            raise NotFoundError(client_id=str(cid))
        return p

    def remove_where(self, predicate: PersonPredicate) -> int:
        doomed = [cid for cid, p in self._by_cid.items() if predicate(p)]
        for cid in doomed:
            del self._by_cid[cid]
        return len(doomed)

    def remove(self, person: Person) -> bool:
        # only drop the entry if it is this exact record, not a newer one with the same key
        return self.remove_where(lambda p: p is person) > 0

    def reindex(self, old_cid: str, person: Person) -> None:
        current = self._by_cid.get(str(old_cid))
        if current is person:
            del self._by_cid[str(old_cid)]
        self._by_cid[person.client_id] = person

    def all(self) -> List[Person]:
        return sorted(self._by_cid.values(), key=_sort_key)

    def reset(self, seed: Optional[Person] = None) -> None:
        self._by_cid = {}
        if seed is not None:
            self.insert(seed)

    def __len__(self) -> int:
        return len(self._by_cid)

    def __contains__(self, cid: object) -> bool:
        return cid in self._by_cid

    def __iter__(self) -> Iterator[Person]:
        return iter(self.all())
