"""
Person records and provisional client id allocation.
"""

from rollcall.core.identity.factory import CidFactory, make_person
from rollcall.core.identity.models import Person, default_presentation

__all__ = ["CidFactory", "Person", "default_presentation", "make_person"]
