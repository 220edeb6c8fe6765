"""
automodeler lifecycle states.

Intended order:

    NEW -> LOADING -> LOADED           (construction with a key, one match)
    NEW -> LOADING -> NEW              (no match / ambiguous match)
    NEW | LOADED -> SAVING -> SAVED    (save)
    SAVED | LOADED -> DELETING -> DELETED

Transitions are not enforced; ``Model.state(new)`` may set any state.
"""

from __future__ import annotations

from enum import Enum


class ModelState(str, Enum):
    NEW = "new"
    LOADING = "loading"
    LOADED = "loaded"
    SAVING = "saving"
    SAVED = "saved"
    DELETING = "deleting"
    DELETED = "deleted"


class LookupStatus(str, Enum):
    """Outcome of the identifier lookup performed at construction."""

    SKIPPED = "skipped"
    FOUND = "found"
    MISSING = "missing"
    AMBIGUOUS = "ambiguous"
