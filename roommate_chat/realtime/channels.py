# roommate_chat/realtime/channels.py


def chat_channel(chat_id: int) -> str:
    return f"chat:{chat_id}"


def room_channel(room_id: int) -> str:
    return f"room:{room_id}"


def user_channel(user_id: int) -> str:
    return f"user:{user_id}"
