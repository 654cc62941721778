"""
Application state management.
Ephemeral in-memory conversation history; nothing here survives a restart.
"""

from collections import OrderedDict
from threading import Lock

from models import Conversation

# --- STATE CONTAINERS ---

# Conversations keyed by id, least recently updated first
CONVERSATIONS: "OrderedDict[str, Conversation]" = OrderedDict()

# Lock for thread-safe operations
HISTORY_LOCK: Lock = Lock()
