class ApplicationError(Exception):
    """Generic failure talking to the portal or handling its documents."""


class UnauthenticatedSessionError(ApplicationError):
    """The portal redirected to its login page: the session is gone."""

    def __init__(self, message: str = "Sessão não autenticada ou expirada.") -> None:
        super().__init__(message)
