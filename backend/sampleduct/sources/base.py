from __future__ import annotations

from abc import ABC, abstractmethod

from sampleduct.schemas.sample import Sample


class SourceError(Exception):
    """Base class for failures talking to a sample source."""

    def __init__(self, source_id: str, message: str) -> None:
        super().__init__(message)
        self.source_id = source_id


class UnauthorizedError(SourceError):
    """The source rejected our credentials."""


class SourceTransportError(SourceError):
    """Network, HTTP or decoding failure."""


class SourceConfigError(SourceError):
    """The source is not configured well enough to build a client."""


class SampleSource(ABC):
    """A remote endpoint exposing the latest sample of named metrics."""

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id

    @abstractmethod
    def get_sample(self, name: str) -> Sample | None:
        """Return the latest sample for ``name``, or None if the source has none.

        Raises SourceError (usually UnauthorizedError or SourceTransportError)
        when the request could not be completed.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source_id!r})"
