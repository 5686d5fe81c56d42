from __future__ import annotations

from collections.abc import Mapping

from sampleduct.parsing.values import utc_now_iso
from sampleduct.schemas.sample import Sample
from sampleduct.sources.base import SampleSource


class StaticSource(SampleSource):
    """Serves fixed values, stamped with the time they are read."""

    def __init__(self, source_id: str, samples: Mapping[str, str]) -> None:
        super().__init__(source_id)
        self._samples = dict(samples)

    def get_sample(self, name: str) -> Sample | None:
        value = self._samples.get(name)
        if value is None:
            return None
        return Sample(name=name, value=value, updated_at=utc_now_iso())
