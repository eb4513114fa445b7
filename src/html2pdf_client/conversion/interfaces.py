from typing import IO, Any, ContextManager, Iterator, Mapping, Protocol


class TransportGateway(Protocol):
    def post_json(self, path: str, payload: Mapping[str, Any]) -> Any:
        """POST a JSON body to an API path and return the decoded JSON (None if not JSON)."""

    def post_multipart(
        self,
        path: str,
        files: Mapping[str, tuple[str, IO[bytes], str]],
        data: Mapping[str, str],
    ) -> Any:
        """POST a multipart/form-data body. No client-side limit on body size."""

    def get_json(self, path: str) -> Any:
        ...

    def download(self, url: str) -> bytes:
        """GET an absolute URL and return the whole body."""

    def open_stream(self, url: str) -> ContextManager[Iterator[bytes]]:
        """GET an absolute URL as a stream of byte chunks."""

    def is_transport_error(self, exc: BaseException) -> bool:
        ...

    def error_details(self, exc: BaseException) -> tuple[int | None, str]:
        """Return the remote status code (if any) and the best available message."""
