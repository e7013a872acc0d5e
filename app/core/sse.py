"""
Helpers for the server-sent events stream produced by Logos.

Logos answers a chat request with ``data: <json>`` lines. The gateway forwards
those bytes untouched and, on the side, rebuilds the assistant's full reply
from them so it can be stored once the stream ends.
"""
import codecs
import json
import logging
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "


class SSEAccumulator:
    """
    Incremental parser for a Logos chat stream.

    Feed it raw chunks in arrival order. A line may be split across chunks, so
    the trailing partial line is held back until its newline arrives or
    ``finish`` is called. ``content`` fragments are concatenated; the most
    recent ``chunk_ids`` list wins. Lines that are not valid JSON are skipped.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._content: List[str] = []
        self.chunk_ids: List[str] = []

    @property
    def content(self) -> str:
        return "".join(self._content)

    def feed(self, chunk: Union[bytes, str]) -> None:
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._pending += chunk

        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._consume_line(line)

    def finish(self) -> None:
        """Flush whatever is left once the stream has ended"""
        self._pending += self._decoder.decode(b"", final=True)
        if self._pending:
            self._consume_line(self._pending)
            self._pending = ""

    def _consume_line(self, line: str) -> None:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return

        payload = parse_data_payload(line[len(DATA_PREFIX):])
        if payload is None:
            return

        content = payload.get("content")
        if isinstance(content, str) and content:
            self._content.append(content)

        chunk_ids = payload.get("chunk_ids")
        if isinstance(chunk_ids, list):
            self.chunk_ids = [str(chunk_id) for chunk_id in chunk_ids]


def parse_data_payload(raw: str) -> Optional[Dict[str, Any]]:
    """Parse the JSON body of a ``data:`` line, or None if it is not a JSON object"""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug(f"Ignoring malformed stream line: {raw[:100]}")
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def format_error_event(message: str) -> bytes:
    """Build the terminal ``error`` event sent when a stream fails mid-flight"""
    return f"event: error\ndata: {json.dumps({'error': message})}\n\n".encode("utf-8")
