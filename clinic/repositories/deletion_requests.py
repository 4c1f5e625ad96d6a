from datetime import timedelta
from typing import List, Optional

from ..schemas.appointment import DeletionRequest

KEY_PREFIX = "deletion_request:"

class DeletionRequestLedger:
    """Pending deletion requests kept in Redis, one key per appointment.

    Writes overwrite any earlier request for the same appointment and every
    entry expires after ``ttl``.
    """

    def __init__(self, redis_client, ttl: timedelta):
        self.redis = redis_client
        self.ttl = ttl

    @staticmethod
    def key(appointment_id: int) -> str:
        return f"{KEY_PREFIX}{appointment_id}"

    def set(self, request: DeletionRequest) -> None:
        self.redis.setex(
            self.key(request.appointment_id),
            int(self.ttl.total_seconds()),
            request.model_dump_json(),
        )

    def get(self, appointment_id: int) -> Optional[DeletionRequest]:
        raw = self.redis.get(self.key(appointment_id))
        if raw is None:
            return None
        return DeletionRequest.model_validate_json(raw)

    def list_pending(self) -> List[DeletionRequest]:
        pending = []
        for key in self.redis.scan_iter(match=f"{KEY_PREFIX}*"):
            raw = self.redis.get(key)
            if raw is None:
                # expired between scan and read
                continue
            pending.append(DeletionRequest.model_validate_json(raw))
        return sorted(pending, key=lambda request: request.requested_at)

    def discard(self, appointment_id: int) -> bool:
        return bool(self.redis.delete(self.key(appointment_id)))
