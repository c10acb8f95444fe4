#!/usr/bin/env python
"""Exceptions class"""


class MerakiAPIError(Exception):
    """Base-class for all exceptions raised by this module."""


class MerakiConfigError(MerakiAPIError):
    """The client was configured with unusable values."""


class TransportError(MerakiAPIError):
    """No HTTP response was obtained, e.g. DNS, connect, or timeout."""

    def __init__(self, message: str, attempts: int = 1) -> None:
        """Remember how many attempts were made before giving up."""
        self.attempts = attempts
        super().__init__(message)


class StatusError(MerakiAPIError):
    """The API responded with a non-2xx status."""

    def __init__(self, message: str, status_code: int, method: str = None, path: str = None) -> None:
        """Add the status and the request line as attributes to this instance."""
        self.status_code = status_code
        self.method = method
        self.path = path
        super().__init__(message)


class RetryableStatusError(StatusError):
    """A retryable status (429, 5xx) persisted after all attempts."""

    def __init__(self, message: str, status_code: int, attempts: int, method: str = None, path: str = None) -> None:
        """Add the number of attempts as an attribute to this instance."""
        self.attempts = attempts
        super().__init__(message, status_code, method, path)


class FatalStatusError(StatusError):
    """A status that is never retried, e.g. 400, 401, 403, 404."""


class NotFoundError(MerakiAPIError):
    """No organization or network matched the identifier."""

    def __init__(self, kind: str, identifier: str, candidates: list, scope: str = None) -> None:
        """Keep the candidates so the message can list them."""
        self.kind = kind
        self.identifier = identifier
        self.candidates = candidates
        self.scope = scope
        super().__init__(str(self))

    def __str__(self):
        """Enumerate every candidate to help the user pick one."""
        where = f" in organization {self.scope}" if self.scope else ""
        if self.candidates:
            available = ', '.join(f"{c['name']} (ID: {c['id']})" for c in self.candidates)
            return f"{self.kind} '{self.identifier}' not found{where}. Available: {available}"
        else:
            return f"{self.kind} '{self.identifier}' not found{where} (no candidates found)"


class AmbiguousNameError(MerakiAPIError):
    """More than one organization or network has the same name."""

    def __init__(self, kind: str, identifier: str, ids: list, scope: str = None) -> None:
        """Keep the colliding IDs so the message can list them."""
        self.kind = kind
        self.identifier = identifier
        self.ids = ids
        self.scope = scope
        super().__init__(str(self))

    def __str__(self):
        """Report the colliding IDs so the user can retry with one of them."""
        where = f" in organization {self.scope}" if self.scope else ""
        return f"multiple {self.kind}s found with name '{self.identifier}'{where}. Use an ID instead: {', '.join(self.ids)}"
