"""
SeenStore - durable record of processed post ids and reported codes.
The JSON file is the only state shared between runs.
"""
import json
import logging
import os
import tempfile
from typing import Any, Set

from core.entities import SeenState

logger = logging.getLogger(__name__)


def _as_str_set(value: Any, field: str, path: str) -> Set[str]:
    if value is None:
        return set()
    if not isinstance(value, list):
        logger.warning(f"Ignoring malformed '{field}' in {path}: expected a list")
        return set()
    return {str(v) for v in value}


class SeenStore:
    def __init__(self, path: str = "seen.json"):
        self.path = path

    def load(self) -> SeenState:
        """
        Read the store. Never raises: a missing, unreadable or malformed
        file yields an empty state.
        """
        if not os.path.exists(self.path):
            logger.info(f"No seen store at {self.path}, starting fresh")
            return SeenState()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Seen store {self.path} missing/invalid, starting fresh: {e}")
            return SeenState()

        if not isinstance(data, dict):
            logger.warning(f"Seen store {self.path} is not a JSON object, starting fresh")
            return SeenState()

        state = SeenState(
            posts=_as_str_set(data.get("posts"), "posts", self.path),
            codes=_as_str_set(data.get("codes"), "codes", self.path),
        )
        logger.info(f"Loaded seen store: {len(state.posts)} posts, {len(state.codes)} codes")
        return state

    def save(self, state: SeenState) -> bool:
        """
        Atomically replace the store with the given state.
        Failures are logged and reported through the return value.
        """
        payload = {
            "posts": sorted(state.posts),
            "codes": sorted(state.codes),
        }
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None

        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".seen-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning(f"Failed writing seen store {self.path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.debug(f"Could not remove temp file {tmp_path}")
            return False

        logger.info(f"Saved seen store: {len(state.posts)} posts, {len(state.codes)} codes")
        return True
