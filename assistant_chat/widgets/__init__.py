"""Widget exports for assistant_chat UI."""

from .activity_bar import ActivityBar
from .code_block import CodeBlock
from .conversation import ConversationView
from .input_box import InputBox
from .message import MessageBubble
from .status_bar import StatusBar

__all__ = [
    "ActivityBar",
    "CodeBlock",
    "ConversationView",
    "InputBox",
    "MessageBubble",
    "StatusBar",
]
