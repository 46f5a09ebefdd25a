"""HMAC audit signatures for approval votes.

A signature binds voter, decision, request and timestamp under a server
secret, so a stored vote can later be checked for tampering.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime

import structlog

from approvalflow.core.domain.approval_request import Vote
from approvalflow.core.domain.enums import VoteDecision

logger = structlog.get_logger(__name__)


class VoteSigner:
    """Signs and verifies votes with HMAC-SHA256.

    Args:
        secret: Server-side signing secret. When omitted, a random secret is
            generated for the lifetime of the process, which makes existing
            signatures unverifiable after a restart.
    """

    def __init__(self, secret: str | None = None) -> None:
        if not secret:
            logger.warning(
                "vote_signer.ephemeral_secret",
                message="No signing secret configured; vote signatures will not survive restarts",
            )
            secret = secrets.token_hex(32)
        self._key = secret.encode("utf-8")

    @staticmethod
    def _message(
        voter_id: str, decision: VoteDecision, request_id: str, timestamp: datetime
    ) -> bytes:
        return "|".join(
            (voter_id, decision.value, request_id, timestamp.isoformat())
        ).encode("utf-8")

    def sign(
        self,
        voter_id: str,
        decision: VoteDecision,
        request_id: str,
        timestamp: datetime,
    ) -> str:
        """Return the hex signature for a vote."""
        message = self._message(voter_id, decision, request_id, timestamp)
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()

    def verify(self, vote: Vote, request_id: str) -> bool:
        """Check a stored vote's signature against ``request_id``."""
        expected = self.sign(vote.voter_id, vote.decision, request_id, vote.timestamp)
        return hmac.compare_digest(expected, vote.signature)
