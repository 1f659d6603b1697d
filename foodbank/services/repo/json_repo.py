from __future__ import annotations

import io
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from pydantic import ValidationError

from foodbank.config import Settings
from foodbank.core.models import Recipe
from foodbank.services.exceptions import RepoError

logger = logging.getLogger(__name__)


# Cross-platform file lock (fcntl for *nix; msvcrt for Windows)
@contextmanager
def _locked(path: str) -> Iterator[io.FileIO]:
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        f = open(path, "a+b")  # create if missing
    except OSError as e:
        raise RepoError(f"Could not open lock file {path}: {e}") from e
    try:
        try:
            import fcntl  # type: ignore
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            locker = ("fcntl", None)
        except ImportError:
            try:
                import msvcrt  # type: ignore
                msvcrt.locking(f.fileno(), msvcrt.LK_LOCK, 1)
                locker = ("msvcrt", 1)
            except (ImportError, OSError) as e:
                raise RepoError(f"Could not lock file {path}: {e}") from e
        except OSError as e:
            raise RepoError(f"Could not lock file {path}: {e}") from e
        try:
            yield f
        finally:
            if locker[0] == "fcntl":
                import fcntl  # type: ignore
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            else:
                import msvcrt  # type: ignore
                msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, locker[1])
    finally:
        f.close()


def _atomic_write(path: str, data: bytes) -> None:
    d = os.path.dirname(path) or "."
    try:
        os.makedirs(d, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=d)
    except OSError as e:
        raise RepoError(f"Atomic write failed for {path}: {e}") from e
    try:
        with os.fdopen(fd, "wb") as w:
            w.write(data)
            w.flush()
            os.fsync(w.fileno())
        os.replace(tmp, path)
    except OSError as e:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise RepoError(f"Atomic write failed for {path}: {e}") from e


def _dumps(obj) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


class JSONLRecipeCatalog:
    """
    Append-only recipe log, one JSON object per line.

    Lines are parsed independently: a malformed or invalid line is logged and
    skipped, never fatal for the whole catalog. There is no in-place update or
    delete; ``compact`` rewrites the log as a snapshot (last record per id wins).
    """

    def __init__(self, settings: Settings):
        self.path = settings.recipes_file
        self._lock_path = self.path + ".lock"

    def _read_lines(self) -> List[bytes]:
        # decoded per line so one bad byte sequence only costs its own record
        try:
            with open(self.path, "rb") as f:
                return f.read().split(b"\n")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise RepoError(f"Failed to read recipes from {self.path}: {e}") from e

    def load(self) -> List[Recipe]:
        recipes: List[Recipe] = []
        for lineno, line in enumerate(self._read_lines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                recipes.append(Recipe.model_validate(json.loads(line.decode("utf-8"))))
            except UnicodeDecodeError as e:
                logger.warning("Skipping recipe line %d in %s: not UTF-8 (%s)", lineno, self.path, e)
            except json.JSONDecodeError as e:
                logger.warning("Skipping recipe line %d in %s: not JSON (%s)", lineno, self.path, e)
            except ValidationError as e:
                logger.warning(
                    "Skipping recipe line %d in %s: %d validation error(s)", lineno, self.path, e.error_count()
                )
        return recipes

    def get(self, recipe_id: str) -> Optional[Recipe]:
        found = None
        for r in self.load():
            if r.id == recipe_id:
                found = r
        return found

    def append(self, recipe: Recipe) -> None:
        line = (_dumps(recipe.to_json_dict()) + "\n").encode("utf-8")
        try:
            with _locked(self._lock_path):
                with open(self.path, "ab") as f:
                    f.write(line)
                    f.flush()
                    os.fsync(f.fileno())
        except OSError as e:
            raise RepoError(f"Failed to append recipe to {self.path}: {e}") from e

    def compact(self) -> int:
        """Rewrite the log without invalid lines or superseded ids. Returns the record count."""
        with _locked(self._lock_path):
            latest: Dict[str, Recipe] = {}
            for r in self.load():
                latest[r.id] = r
            payload = "".join(_dumps(r.to_json_dict()) + "\n" for r in latest.values())
            _atomic_write(self.path, payload.encode("utf-8"))
        logger.info("Compacted recipe log %s to %d record(s)", self.path, len(latest))
        return len(latest)


class JSONSelectedMealRepo:
    """Single-slot mailbox holding the recipe picked for meal preparation."""

    def __init__(self, settings: Settings):
        self.path = settings.selected_meal_file

    def load(self) -> Optional[Recipe]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return Recipe.model_validate(json.load(f))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            raise RepoError(f"Could not load selected meal from {self.path}: {e}") from e

    def save(self, recipe: Recipe) -> None:
        _atomic_write(self.path, _dumps(recipe.to_json_dict()).encode("utf-8"))
