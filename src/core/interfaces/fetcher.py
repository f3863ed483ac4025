"""Contract for JSON-over-HTTP fetching.

The resolver and the timeline service only ever talk to the network through
this protocol. Tests swap in a recording fake; production uses
`adapters.http_client.HttpxJsonFetcher`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class JsonFetcher(Protocol):
    """Minimal GET-and-decode contract.

    Rules:
    - One call performs exactly one HTTP GET.
    - Non-2xx statuses, timeouts and transport errors raise (any exception);
      the caller wraps them into its own error type.
    - Returns the decoded JSON body.
    """

    async def get_json(
        self,
        url: str,
        *,
        accept: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        ...
