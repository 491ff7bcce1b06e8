from swapshop.models.conversation import Conversation, Message
from swapshop.models.garment import Garment
from swapshop.models.match import Match
from swapshop.models.notification import Notification
from swapshop.models.push_token import PushToken
from swapshop.models.super_like import SuperLike
from swapshop.models.swipe import Swipe
from swapshop.models.user import User

__all__ = [
    "Conversation",
    "Garment",
    "Match",
    "Message",
    "Notification",
    "PushToken",
    "SuperLike",
    "Swipe",
    "User",
]
