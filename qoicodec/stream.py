"""Sequential byte source/sink helpers shared by the encoder and decoder.

A reader is any object with ``read(size)`` and a writer any object with
``write(data)`` (``flush()`` is optional). No seeking is ever done.
"""

from .errors import QOIIOError, UnexpectedEof


def read_exact(reader, size: int) -> bytes:
    """Read exactly ``size`` bytes, raising UnexpectedEof if the source runs dry."""
    chunks = []
    remaining = size

    while remaining > 0:
        try:
            chunk = reader.read(remaining)
        except OSError as e:
            raise QOIIOError(e) from e

        if not chunk:
            raise UnexpectedEof()

        chunks.append(chunk)
        remaining -= len(chunk)

    return b"".join(chunks)


def read_byte(reader) -> int:
    return read_exact(reader, 1)[0]


def write_all(writer, data) -> None:
    try:
        writer.write(data)
    except OSError as e:
        raise QOIIOError(e) from e


def flush(writer) -> None:
    flush_fn = getattr(writer, "flush", None)
    if flush_fn is None:
        return

    try:
        flush_fn()
    except OSError as e:
        raise QOIIOError(e) from e
