from .auth import AuthProvider, SessionAuthProvider

__all__ = ["AuthProvider", "SessionAuthProvider"]
