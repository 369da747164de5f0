from rollcall.core.session.manager import PendingLogin, SessionController, SessionState

__all__ = ["PendingLogin", "SessionController", "SessionState"]
