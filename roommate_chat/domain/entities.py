# roommate_chat/domain/entities.py
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utcnow() -> datetime:
    return datetime.now(UTC)


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


def pair_key(user_a_id: int, user_b_id: int) -> str:
    """Order-independent key for a pair of users."""
    low, high = sorted((user_a_id, user_b_id))
    return f"{low}:{high}"


@dataclass(frozen=True)
class RoomMembership:
    owner_id: int
    tenant_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def member_ids(self) -> list[int]:
        # owner first, then tenants in room order, without repeats
        members = [self.owner_id]
        for tenant_id in self.tenant_ids:
            if tenant_id not in members:
                members.append(tenant_id)
        return members

    def is_member(self, user_id: int) -> bool:
        return user_id == self.owner_id or user_id in self.tenant_ids
