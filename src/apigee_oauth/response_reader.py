from requests import Response


CHUNK_SIZE = 8192


def read_response(response: Response, chunk_size: int = CHUNK_SIZE) -> str:
    """
    Drain a streamed response body into a single string.

    Chunks are accumulated until the stream ends, then decoded once so that
    multi-byte characters split across chunk boundaries survive.
    """
    data = bytearray()

    for chunk in response.iter_content(chunk_size=chunk_size):
        if chunk:
            data.extend(chunk)

    return data.decode(response.encoding or "utf-8", errors="replace")
