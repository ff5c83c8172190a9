from edufin.api.routes import auth, content, expenses, goals

__all__ = ["auth", "content", "expenses", "goals"]
