"""ID generation and timestamp utilities."""

import itertools
import re
import threading
import time
from datetime import datetime, timezone

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    digits = []
    while True:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
        if value == 0:
            break
    return "".join(reversed(digits))


def sanitize_name(name: str) -> str:
    """Lowercase a human-readable name and replace anything outside [a-z0-9] with '_'."""
    return re.sub(r"[^a-z0-9]", "_", name.lower())


class IdentifierGenerator:
    """Derives graph, node and edge ids from readable names plus a time/counter suffix.

    The counter only ever increases, so ids from one generator never repeat,
    even when several are created within the same millisecond.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._graph_counter = itertools.count(1)
        self._sequence = itertools.count(1)

    def _suffix(self) -> str:
        with self._lock:
            seq = next(self._sequence)
        millis = time.time_ns() // 1_000_000
        return f"{to_base36(millis)}{to_base36(seq)}"

    def generate_graph_id(self) -> str:
        """graph_<YYYYMMDDHHMMSS>_<NNN>"""
        with self._lock:
            counter = next(self._graph_counter)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        return f"graph_{stamp}_{counter:03d}"

    def generate_node_id(self, agent_name: str) -> str:
        return f"node_{sanitize_name(agent_name)}_{self._suffix()}"

    def generate_edge_id(self, from_node: str, to_node: str) -> str:
        return f"edge_{from_node}_to_{to_node}_{self._suffix()}"
