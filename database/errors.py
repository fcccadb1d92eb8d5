# database/errors.py
from __future__ import annotations


class ThreadError(Exception):
    """Base de toutes les erreurs du cœur « threads »."""


class NotFound(ThreadError):
    pass


class ValidationFailed(ThreadError):
    pass


class StoreUnavailable(ThreadError):
    """Le stockage n'a pas répondu (timeout, connexion perdue). Le cœur ne réessaie pas."""


class PartialCascadeFailure(ThreadError):
    """
    Les threads sont supprimés mais la rétractation des références a échoué.
    `victim_ids` sert au passage de réparation (/repair).
    """

    def __init__(self, victim_ids: set[int], cause: BaseException | None = None):
        self.victim_ids = frozenset(victim_ids)
        self.cause = cause
        super().__init__(
            f"threads {sorted(self.victim_ids)} deleted but reference retraction failed: {cause}"
        )
