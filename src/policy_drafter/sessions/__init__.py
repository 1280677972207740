from policy_drafter.sessions.conversation_log import ConversationLog
from policy_drafter.sessions.kv_store import InMemoryKeyValueStore, KeyValueStore, SqliteKeyValueStore
from policy_drafter.sessions.models import ConversationEntry, Role, Session
from policy_drafter.sessions.session_store import SessionStore

__all__ = [
    "ConversationEntry",
    "ConversationLog",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "Role",
    "Session",
    "SessionStore",
    "SqliteKeyValueStore",
]
