from __future__ import annotations
import threading
from typing import Dict, Optional

from .models import Listener


class Snapshot:
    def __init__(self):
        self.lock = threading.Lock()
        self.listeners: Dict[str, Listener] = {}
        self.captured_at: Optional[float] = None
        self.backend: Optional[str] = None
