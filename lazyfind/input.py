"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing, arrow keys, control keys, and UTF-8 text.
"""

from __future__ import annotations

import os
import select

from . import keys

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": keys.CTRL_C,
    b"\x15": keys.CTRL_U,
    b"\t": keys.TAB,
    b"\x08": keys.BACKSPACE,
    b"\x7f": keys.BACKSPACE,
    b"\r": keys.ENTER,
    b"\n": keys.ENTER,
}

_ARROW_KEYS: dict[bytes, str] = {
    b"A": keys.UP,
    b"B": keys.DOWN,
    b"C": keys.RIGHT,
    b"D": keys.LEFT,
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _decode_text(fd: int, first: bytes) -> str:
    data = first
    for _ in range(_utf8_length(first[0]) - 1):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token from ``fd``; returns ``""`` when nothing arrives in time."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return control

    if ch != b"\x1b":
        return _decode_text(fd, ch)

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return keys.ESC
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return keys.ESC
    final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if final is None:
        return keys.ESC
    arrow = _ARROW_KEYS.get(final)
    if arrow is not None:
        return arrow
    # Swallow the rest of an unsupported CSI sequence up to its final byte.
    while final is not None and not (0x40 <= final[0] <= 0x7E):
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    return ""
