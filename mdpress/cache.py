from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

LOGGER = logging.getLogger(__name__)

COUNTER_FILE = ".blog-counter"


def load_state(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        LOGGER.warning("Could not read counter file %s: %s", path, exc)
        return {}
    if text.isdigit():
        return {"counter": int(text), "posts": {}}
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        LOGGER.warning("Could not parse counter file %s, starting from 0", path)
        return {}
    return data if isinstance(data, dict) else {}


def write_state(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=True, sort_keys=True), encoding="utf-8")


class PostIdCounter:
    """Hands out monotonic post IDs that stay attached to a post's path.

    The state file is read once by ``load`` and written once by ``persist``.
    IDs are never reused, even after the post that held one is removed.
    """

    def __init__(self, path: Path | str = COUNTER_FILE) -> None:
        self.path = Path(path)
        self.counter = 0
        self.known: dict[str, int] = {}
        self.loaded = False

    def load(self) -> "PostIdCounter":
        state = load_state(self.path)
        counter = state.get("counter", 0)
        self.counter = counter if isinstance(counter, int) and counter > 0 else 0
        posts = state.get("posts", {})
        self.known = {}
        if isinstance(posts, dict):
            for key, value in posts.items():
                if isinstance(value, int) and value > 0:
                    self.known[str(key)] = value
        if self.known:
            self.counter = max(self.counter, max(self.known.values()))
        self.loaded = True
        return self

    def id_for(self, key: str) -> int:
        if not self.loaded:
            self.load()
        existing = self.known.get(key)
        if existing is not None:
            return existing
        self.counter += 1
        self.known[key] = self.counter
        return self.counter

    def assign(self, keys: Iterable[str]) -> dict[str, int]:
        return {key: self.id_for(key) for key in keys}

    def persist(self) -> None:
        try:
            write_state(self.path, {"counter": self.counter, "posts": self.known})
        except OSError as exc:
            LOGGER.error("Could not save counter file %s: %s", self.path, exc)
