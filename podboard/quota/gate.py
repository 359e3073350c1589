import logging
import threading

from podboard.errors import QuotaExceededError
from podboard.session.schemas import Identity
from podboard.session.store import SessionManager, guest_trials_key

_logger = logging.getLogger(__name__)

GUEST_TRIAL_LIMIT = 1
USER_TRIAL_LIMIT = 3


class QuotaGate:
    """
    Admission control on job submission.

    Guests get ``guest_limit`` lifetime submissions counted per device
    session; signed-in users get ``user_limit`` counted on their account.
    ``try_consume`` checks and increments under a single lock so concurrent
    submissions from one identity cannot be over-admitted.
    """

    def __init__(
        self,
        sessions: SessionManager,
        *,
        guest_limit: int = GUEST_TRIAL_LIMIT,
        user_limit: int = USER_TRIAL_LIMIT,
    ):
        self.sessions = sessions
        self.guest_limit = guest_limit
        self.user_limit = user_limit
        self._lock = threading.Lock()

    def limit(self, identity: Identity) -> int:
        return self.guest_limit if identity.is_guest else self.user_limit

    def used(self, identity: Identity) -> int:
        if identity.user is None:
            raw = self.sessions.store.get(guest_trials_key(identity.session_id))
            try:
                return int(raw or 0)
            except ValueError:
                _logger.warning(
                    "Invalid guest trial counter %r for %s", raw, identity.session_id
                )
                return 0

        account = self.sessions.load_account(identity.user.id)
        return (account or identity.user).free_trials_used

    def remaining(self, identity: Identity) -> int:
        return max(0, self.limit(identity) - self.used(identity))

    def can_submit(self, identity: Identity) -> bool:
        return self.remaining(identity) > 0

    def record_submission(self, identity: Identity) -> None:
        """Increment the identity's counter unconditionally."""
        with self._lock:
            self._increment(identity)

    def try_consume(self, identity: Identity) -> bool:
        """Atomically spend one trial; False when none are left."""
        with self._lock:
            if not self.can_submit(identity):
                return False
            self._increment(identity)
            return True

    def consume(self, identity: Identity) -> None:
        """Like ``try_consume`` but raises ``QuotaExceededError`` when exhausted."""
        if not self.try_consume(identity):
            limit = self.limit(identity)
            if identity.is_guest:
                message = (
                    f"Free trial used. Sign up for {self.user_limit} more free podcasts."
                )
            else:
                message = (
                    f"All {limit} free podcasts used. Paid plans are coming soon."
                )
            _logger.info(f"Quota exceeded for {identity.key}")
            raise QuotaExceededError(message, limit=limit, used=self.used(identity))

    def trial_message(self, identity: Identity) -> str:
        """Prompt shown next to the submission form."""
        if identity.is_guest:
            if self.used(identity) == 0:
                return "No sign-up required for your first try"
            return f"Sign up for {self.user_limit} more free podcasts"

        remaining = self.remaining(identity)
        return f"{remaining} free podcast{'s' if remaining != 1 else ''} remaining"

    def _increment(self, identity: Identity) -> None:
        if identity.user is None:
            key = guest_trials_key(identity.session_id)
            self.sessions.store.set(key, str(self.used(identity) + 1))
            return

        account = self.sessions.load_account(identity.user.id) or identity.user
        self.sessions.save_user(
            account.model_copy(
                update={"free_trials_used": account.free_trials_used + 1}
            )
        )
