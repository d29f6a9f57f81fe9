"""Access control for listener connections and Stream ID handling.

A listener inspects each incoming connection through an
:class:`AccessControl` object. ``on_accept`` returns normally to accept
the connection, or raises :class:`ConnectionRejected` to reject it.

Stream IDs may use the structured access control form
``#!::key1=value1,key2=value2,...`` with the standard keys ``r``
(resource), ``m`` (mode), ``s`` (session), ``t`` (type), ``u`` (user)
and ``h`` (host).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

# Handshake extension command type carrying the Stream ID.
SRT_CMD_SID = 5

# Maximum Stream ID length in bytes.
SRT_MAX_STREAM_ID_LEN = 512

STRUCTURED_PREFIX = "#!::"

# Mode values (``m`` key).
MODE_REQUEST = "request"
MODE_PUBLISH = "publish"
MODE_BIDIRECTIONAL = "bidirectional"

# Type values (``t`` key).
TYPE_STREAM = "stream"
TYPE_FILE = "file"
TYPE_AUTH = "auth"


@dataclass
class HandshakeInfo:
    """What is known about an incoming connection when access is decided."""

    peer_addr: Tuple[str, int]
    stream_id: str = ""
    is_encrypted: bool = False
    peer_socket_id: int = 0
    peer_version: int = 0


class ConnectionRejected(Exception):
    """Raised by an access control check to refuse a connection.

    ``reason`` names the rejection reason reported back to the caller.
    """

    def __init__(self, reason: str = "peer") -> None:
        super().__init__(f"connection rejected: {reason}")
        self.reason = reason

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConnectionRejected):
            return NotImplemented
        return self.reason == other.reason

    def __hash__(self) -> int:
        return hash(self.reason)


class AccessControl(ABC):
    """Decides whether a listener accepts an incoming connection."""

    @abstractmethod
    def on_accept(self, info: HandshakeInfo) -> None:
        """Return to accept; raise :class:`ConnectionRejected` to reject."""


class AcceptAll(AccessControl):
    """Accepts every connection."""

    def on_accept(self, info: HandshakeInfo) -> None:
        return None


class AccessControlFn(AccessControl):
    """Access control delegated to a callable taking a :class:`HandshakeInfo`."""

    def __init__(self, func: Callable[[HandshakeInfo], None]) -> None:
        self._func = func

    def on_accept(self, info: HandshakeInfo) -> None:
        self._func(info)


def parse_stream_id(ext_data: Iterable[int]) -> str:
    """Decode a Stream ID from the 32-bit words of its handshake extension.

    Words hold UTF-8 bytes in little-endian order; trailing NUL padding
    is removed and invalid UTF-8 is replaced.
    """
    raw = b"".join((word & 0xFFFFFFFF).to_bytes(4, "little") for word in ext_data)
    return raw.rstrip(b"\x00").decode("utf-8", errors="replace")


def serialize_stream_id(stream_id: str) -> List[int]:
    """Encode a Stream ID as an extension header word followed by data words.

    An empty Stream ID yields an empty list.
    """
    if not stream_id:
        return []
    raw = stream_id.encode("utf-8")
    raw += b"\x00" * (-len(raw) % 4)
    size_words = len(raw) // 4
    words = [(SRT_CMD_SID << 16) | size_words]
    words.extend(
        int.from_bytes(raw[i:i + 4], "little") for i in range(0, len(raw), 4)
    )
    return words


@dataclass
class StreamIdInfo:
    """A Stream ID split into its access control fields."""

    resource: Optional[str] = None
    mode: Optional[str] = None
    session_id: Optional[str] = None
    content_type: Optional[str] = None
    user_name: Optional[str] = None
    host_name: Optional[str] = None
    extra: List[Tuple[str, str]] = field(default_factory=list)
    raw: str = ""

    _KEYS = (
        ("r", "resource"),
        ("m", "mode"),
        ("s", "session_id"),
        ("t", "content_type"),
        ("u", "user_name"),
        ("h", "host_name"),
    )

    @classmethod
    def parse(cls, stream_id: str) -> "StreamIdInfo":
        """Parse a Stream ID.

        The structured ``#!::key=value,...`` form fills the standard
        fields and collects unknown keys in ``extra``; any other
        non-empty string is taken as the resource name.
        """
        info = cls(raw=stream_id)
        if not stream_id:
            return info

        if not stream_id.startswith(STRUCTURED_PREFIX):
            info.resource = stream_id
            return info

        attrs = dict(cls._KEYS)
        for pair in stream_id[len(STRUCTURED_PREFIX):].split(","):
            pair = pair.strip()
            if not pair or "=" not in pair:
                continue
            key, _, value = pair.partition("=")
            attr = attrs.get(key)
            if attr is None:
                info.extra.append((key, value))
            else:
                setattr(info, attr, value)
        return info

    def to_stream_id(self) -> str:
        """Format the fields back into the structured Stream ID form."""
        parts = [
            f"{key}={getattr(self, attr)}"
            for key, attr in self._KEYS
            if getattr(self, attr) is not None
        ]
        parts.extend(f"{key}={value}" for key, value in self.extra)
        if not parts:
            return ""
        return STRUCTURED_PREFIX + ",".join(parts)