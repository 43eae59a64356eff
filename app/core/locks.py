import threading
from collections import defaultdict

_registry_lock = threading.Lock()
_tournament_locks = defaultdict(threading.Lock)


def tournament_lock(tournament_id: str) -> threading.Lock:
    """Return the process-wide lock that serializes writes to one tournament."""
    with _registry_lock:
        return _tournament_locks[tournament_id]
