import codecs

LINE_TERMINATOR = "\n"


class LineBufferDecoder:
    """Turns arbitrarily split fragments into complete lines.

    Bytes go through an incremental UTF-8 decoder, so a multi-byte character
    split across two fragments is only decoded once its last byte arrives.
    The pending text never contains a terminator. Its size is not capped: a
    peer that never sends a terminator grows it until the stream ends.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending: list[str] = []

    @property
    def pending(self) -> str:
        return "".join(self._pending)

    def feed(self, fragment: bytes | str) -> list[str]:
        if isinstance(fragment, str):
            text = fragment
        else:
            text = self._decoder.decode(fragment)

        if not text:
            return []

        pieces = text.split(LINE_TERMINATOR)
        if len(pieces) == 1:
            self._pending.append(text)
            return []

        self._pending.append(pieces[0])
        lines = ["".join(self._pending)]
        lines.extend(pieces[1:-1])

        tail = pieces[-1]
        self._pending = [tail] if tail else []
        return lines

    def flush(self) -> str | None:
        tail = self._decoder.decode(b"", final=True)
        if tail:
            self._pending.append(tail)

        remaining = "".join(self._pending)
        self._pending = []
        if not remaining.strip():
            return None
        return remaining
