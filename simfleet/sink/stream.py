"""JSON-lines sink — documents printed one per line. Used for dry runs."""

from __future__ import annotations

import sys
from typing import TextIO

import orjson

from simfleet.exceptions import PublishError
from simfleet.sink.base import BaseSink
from simfleet.types import MetricSample


class JsonLinesSink(BaseSink):
    name = "jsonl"

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self._stream = stream or sys.stdout

    async def _write(self, sample: MetricSample) -> None:
        try:
            line = orjson.dumps(sample.to_document()).decode()
            self._stream.write(line + "\n")
        except (orjson.JSONEncodeError, TypeError, OSError, ValueError) as e:
            raise PublishError(str(e)) from e

    async def aclose(self) -> None:
        self._stream.flush()
