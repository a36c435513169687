"""Session check guarding routes that reach the provider."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Per-request view of the host session."""

    is_authenticated: bool = False
    access_token: str | None = None

    def __repr__(self) -> str:
        linked = self.access_token is not None
        return f"RequestContext(is_authenticated={self.is_authenticated}, linked={linked})"


class SessionGate:
    """Decides whether a request may reach protected routes."""

    def authorize(self, context: RequestContext) -> bool:
        return bool(context.is_authenticated)
