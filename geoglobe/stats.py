"""Cumulative statistics and today's saved game, kept in a JSON file."""
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional

from .data import normalize_name
from .engine import GuessRecord
from .session import MAX_GUESSES

logger = logging.getLogger(__name__)

GAME_STATE_KEY = "geoGlobeGameState"
STATS_KEY = "geoGlobeStats"


class JsonStore:
    """Tiny key-value store backed by one JSON file."""

    def __init__(self, path):
        self.path = path

    def _load(self) -> Dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data):
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise

    def get(self, key, default=None):
        return self._load().get(key, default)

    def set(self, key, value):
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key):
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


# ==================== Statistics ====================
def empty_distribution(max_guesses=MAX_GUESSES) -> Dict[int, int]:
    return {n: 0 for n in range(1, max_guesses + 1)}


@dataclass
class Stats:
    games_played: int = 0
    games_won: int = 0
    current_streak: int = 0
    max_streak: int = 0
    last_played: Optional[str] = None
    guess_distribution: Dict[int, int] = field(default_factory=empty_distribution)

    @property
    def win_percentage(self) -> int:
        if not self.games_played:
            return 0
        return round(self.games_won / self.games_played * 100)

    def record(self, won, num_guesses, today: date):
        self.games_played += 1
        if won:
            self.games_won += 1
            self.guess_distribution[num_guesses] = self.guess_distribution.get(num_guesses, 0) + 1
            yesterday = (today - timedelta(days=1)).isoformat()
            if self.last_played == yesterday:
                self.current_streak += 1
            else:
                self.current_streak = 1
            self.max_streak = max(self.current_streak, self.max_streak)
        else:
            self.current_streak = 0
        self.last_played = today.isoformat()

    def to_dict(self):
        return {
            "gamesPlayed": self.games_played,
            "gamesWon": self.games_won,
            "currentStreak": self.current_streak,
            "maxStreak": self.max_streak,
            "lastPlayedDate": self.last_played,
            # JSON object keys are strings
            "guessDistribution": {str(k): v for k, v in self.guess_distribution.items()},
        }

    @classmethod
    def from_dict(cls, data, max_guesses=MAX_GUESSES):
        stats = cls(
            games_played=int(data.get("gamesPlayed", 0)),
            games_won=int(data.get("gamesWon", 0)),
            current_streak=int(data.get("currentStreak", 0)),
            max_streak=int(data.get("maxStreak", 0)),
            last_played=data.get("lastPlayedDate"),
            guess_distribution=empty_distribution(max_guesses),
        )
        for k, v in (data.get("guessDistribution") or {}).items():
            # wins beyond a since-lowered limit stay, empty slots go
            if int(k) <= max_guesses or int(v):
                stats.guess_distribution[int(k)] = int(v)
        return stats


def load_stats(store: JsonStore, max_guesses=MAX_GUESSES) -> Stats:
    data = store.get(STATS_KEY)
    if not data:
        return Stats(guess_distribution=empty_distribution(max_guesses))
    try:
        return Stats.from_dict(data, max_guesses)
    except (TypeError, ValueError, AttributeError) as exc:
        logger.warning("Resetting unreadable statistics: %s", exc)
        return Stats(guess_distribution=empty_distribution(max_guesses))


def save_stats(store: JsonStore, stats: Stats):
    store.set(STATS_KEY, stats.to_dict())


# ==================== Saved Game ====================
@dataclass
class SavedGame:
    guesses: List[GuessRecord]
    game_over: bool
    won: bool


def load_saved_game(store: JsonStore, today: date, target: Optional[str] = None) -> Optional[SavedGame]:
    data = store.get(GAME_STATE_KEY)
    if not data:
        return None
    if data.get("date") != today.isoformat():
        logger.info("Discarding saved game from %s", data.get("date"))
        store.remove(GAME_STATE_KEY)
        return None
    try:
        guesses = [GuessRecord.from_dict(g) for g in data.get("guesses", [])]
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Discarding unreadable saved game: %s", exc)
        store.remove(GAME_STATE_KEY)
        return None
    if target is not None and any(normalize_name(g.target) != normalize_name(target) for g in guesses):
        # the dataset changed since the save, so today has a different target
        logger.info("Discarding saved game played against another target")
        store.remove(GAME_STATE_KEY)
        return None
    return SavedGame(guesses, bool(data.get("gameOver")), bool(data.get("won")))


def save_game(store: JsonStore, today: date, session):
    store.set(GAME_STATE_KEY, {
        "date": today.isoformat(),
        "guesses": [g.to_dict() for g in session.guesses],
        "gameOver": session.game_over,
        "won": session.won,
    })
