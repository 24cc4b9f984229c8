"""Conversation handling inside threads.

Key components:
- ConversationAuthorizer: decides whether a message gets a reply
- HistoryBuilder: rebuilds the role-tagged history of a thread
- ChatController: orchestrates one reply end to end
- ConversationStarter: the ``/chat`` command
"""

from .authorizer import ConversationAuthorizer
from .commands import CHAT_COMMAND, COMMANDS, ConversationStarter
from .controller import ChatController
from .history import HistoryBuilder

__all__ = [
    "ConversationAuthorizer",
    "CHAT_COMMAND",
    "COMMANDS",
    "ConversationStarter",
    "ChatController",
    "HistoryBuilder",
]
