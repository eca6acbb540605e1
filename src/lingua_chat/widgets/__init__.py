"""Widget exports for lingua_chat UI."""

from .activity_bar import ActivityBar
from .conversation import ConversationView
from .input_box import DraftArea, InputBox
from .message import MessageBubble
from .status_bar import StatusBar

__all__ = [
    "ActivityBar",
    "ConversationView",
    "DraftArea",
    "InputBox",
    "MessageBubble",
    "StatusBar",
]
