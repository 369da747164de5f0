from rollcall.core.roster.store import PersonPredicate, RosterStore

__all__ = ["PersonPredicate", "RosterStore"]
