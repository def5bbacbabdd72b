"""Header processors applied around every XML-RPC call."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, MutableMapping, Protocol


class HeaderProcessor(Protocol):
    """Hooks run on outgoing and incoming HTTP headers."""

    def compose_request(self, headers: MutableMapping[str, str]) -> None:
        """Add or rewrite outgoing headers before the request is sent."""
        ...

    def parse_response(self, headers: Mapping[str, Any]) -> None:
        """Inspect response headers once the transport has completed."""
        ...


class HeaderProcessorChain:
    """Ordered collection of header processors.

    Each hook is forwarded to every processor in registration order.
    """

    def __init__(
        self, processors: list[HeaderProcessor] | None = None
    ) -> None:
        self._processors: list[HeaderProcessor] = list(processors or [])

    def register(
        self, processor: HeaderProcessor, *, first: bool = False
    ) -> None:
        if first:
            self._processors.insert(0, processor)
        else:
            self._processors.append(processor)

    def compose_request(self, headers: MutableMapping[str, str]) -> None:
        for processor in self._processors:
            processor.compose_request(headers)

    def parse_response(self, headers: Mapping[str, Any]) -> None:
        for processor in self._processors:
            processor.parse_response(headers)

    def __iter__(self) -> Iterator[HeaderProcessor]:
        return iter(self._processors)

    def __len__(self) -> int:
        return len(self._processors)
