# roommate_chat/infrastructure/models.py
from datetime import UTC, datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from roommate_chat.domain.entities import MessageType, RoomMembership, pair_key, utcnow
from roommate_chat.infrastructure.database import Base


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes, also on backends that store naive values (SQLite)."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: Optional[datetime], dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


room_chat_participants = Table(
    "room_chat_participants",
    Base.metadata,
    Column("room_chat_id", Integer, ForeignKey("room_chats.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    avatar: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    title: Mapped[str] = mapped_column(String)
    owner_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    capacity: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    owner: Mapped[User] = relationship("User", lazy="select")
    tenants: Mapped[List["RoomTenant"]] = relationship(
        "RoomTenant",
        order_by="RoomTenant.position",
        cascade="all, delete-orphan",
        lazy="select",
    )

    @property
    def tenant_ids(self) -> list[int]:
        return [tenant.user_id for tenant in self.tenants]

    @property
    def membership(self) -> RoomMembership:
        return RoomMembership(owner_id=self.owner_id, tenant_ids=tuple(self.tenant_ids))


class RoomTenant(Base):
    __tablename__ = "room_tenants"

    __table_args__ = (UniqueConstraint("room_id", "user_id", name="uq_room_tenant"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[int] = mapped_column(Integer, ForeignKey("rooms.id"), index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)


class DirectChat(Base):
    __tablename__ = "direct_chats"

    __table_args__ = (
        CheckConstraint(
            "participant_a_id <> participant_b_id", name="ck_direct_chat_distinct"
        ),
        # at most one active chat per room and unordered pair
        Index(
            "uq_direct_chats_room_pair_active",
            "room_id",
            "pair_key",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        Index("ix_direct_chats_last_message_at", "last_message_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    room_id: Mapped[int] = mapped_column(Integer, ForeignKey("rooms.id"), index=True)
    participant_a_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), index=True
    )
    participant_b_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), index=True
    )
    pair_key: Mapped[str] = mapped_column(String)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    last_message_content: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_message_sender_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    last_message_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow
    )

    room: Mapped[Room] = relationship("Room", lazy="select")
    participant_a: Mapped[User] = relationship(
        "User", foreign_keys=[participant_a_id], lazy="select"
    )
    participant_b: Mapped[User] = relationship(
        "User", foreign_keys=[participant_b_id], lazy="select"
    )
    messages: Mapped[List["DirectMessage"]] = relationship(
        "DirectMessage",
        back_populates="chat",
        order_by="DirectMessage.id",
        cascade="all, delete-orphan",
        lazy="select",
    )
    read_by: Mapped[List["DirectChatRead"]] = relationship(
        "DirectChatRead", cascade="all, delete-orphan", lazy="select"
    )

    def __init__(self, **kwargs):
        if "pair_key" not in kwargs:
            kwargs["pair_key"] = pair_key(
                kwargs["participant_a_id"], kwargs["participant_b_id"]
            )
        super().__init__(**kwargs)

    @property
    def participant_ids(self) -> list[int]:
        return [self.participant_a_id, self.participant_b_id]

    @property
    def participants(self) -> list[User]:
        return [self.participant_a, self.participant_b]

    @property
    def last_message(self) -> Optional[dict]:
        if self.last_message_at is None:
            return None
        return {
            "content": self.last_message_content,
            "sender": self.last_message_sender_id,
            "timestamp": self.last_message_at,
        }

    def has_participant(self, user_id: int) -> bool:
        return user_id in self.participant_ids


class DirectMessage(Base):
    __tablename__ = "direct_messages"

    __table_args__ = (
        Index("ix_direct_messages_chat_id_id", "chat_id", "id"),
        Index("ix_direct_messages_chat_read", "chat_id", "is_read"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    chat_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("direct_chats.id"), index=True
    )
    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    content: Mapped[str] = mapped_column(String(1000), default="")
    message_type: Mapped[str] = mapped_column(String, default=MessageType.TEXT.value)
    file_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True)

    chat: Mapped[DirectChat] = relationship(
        "DirectChat", back_populates="messages", lazy="select"
    )
    sender: Mapped[User] = relationship("User", lazy="select")


class DirectChatRead(Base):
    __tablename__ = "direct_chat_reads"

    __table_args__ = (
        UniqueConstraint("chat_id", "user_id", name="uq_direct_chat_read_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chat_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("direct_chats.id"), index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"))
    read_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)


class RoomChat(Base):
    __tablename__ = "room_chats"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    room_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rooms.id"), unique=True, index=True
    )
    last_message_content: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_message_sender_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    last_message_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow
    )

    participants: Mapped[List[User]] = relationship(
        "User", secondary=room_chat_participants, lazy="select"
    )
    messages: Mapped[List["RoomMessage"]] = relationship(
        "RoomMessage",
        back_populates="room_chat",
        order_by="RoomMessage.id",
        cascade="all, delete-orphan",
        lazy="select",
    )
    read_by: Mapped[List["RoomChatRead"]] = relationship(
        "RoomChatRead", cascade="all, delete-orphan", lazy="select"
    )

    @property
    def participant_ids(self) -> list[int]:
        return [user.id for user in self.participants]

    @property
    def last_message(self) -> Optional[dict]:
        if self.last_message_at is None:
            return None
        return {
            "content": self.last_message_content,
            "sender": self.last_message_sender_id,
            "timestamp": self.last_message_at,
        }


class RoomMessage(Base):
    __tablename__ = "room_messages"

    __table_args__ = (Index("ix_room_messages_chat_id_id", "room_chat_id", "id"),)

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    room_chat_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("room_chats.id"), index=True
    )
    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    content: Mapped[str] = mapped_column(String(1000), default="")
    message_type: Mapped[str] = mapped_column(String, default=MessageType.TEXT.value)
    file_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True)

    room_chat: Mapped[RoomChat] = relationship(
        "RoomChat", back_populates="messages", lazy="select"
    )
    sender: Mapped[User] = relationship("User", lazy="select")


class RoomChatRead(Base):
    __tablename__ = "room_chat_reads"

    __table_args__ = (
        UniqueConstraint("room_chat_id", "user_id", name="uq_room_chat_read_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_chat_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("room_chats.id"), index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"))
    read_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
