"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller plus the bearer credential for outbound calls.

    A context without user_id is anonymous: it may read public data where the
    backend allows it, and every write fails authorization.
    """

    user_id: UUID | None
    access_token: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None
