from __future__ import annotations


class TopPostsError(Exception):
    """Base exception for all top-posts service errors."""


class TransportError(TopPostsError):
    """Upstream unreachable or answering with a non-2xx status."""

    def __init__(self, resource: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{resource}: {message}")
        self.resource = resource
        self.status_code = status_code


class UpstreamPayloadError(TransportError):
    """Upstream answered 2xx but the body is not a JSON array of records."""
