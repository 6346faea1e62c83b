from voicetwin.session.store import InMemorySessionStore, SessionStore

__all__ = ["InMemorySessionStore", "SessionStore"]
