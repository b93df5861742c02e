import logging
from typing import Iterable, Tuple

from .data import CountryIndex, normalize_name
from .engine import Country, GuessRecord, Tier, score_countries

logger = logging.getLogger(__name__)

MAX_GUESSES = 10


class GuessError(Exception):
    title = "Invalid guess"

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class GameOverError(GuessError):
    title = "Game over"


class EmptyGuessError(GuessError):
    title = "Empty guess"


class UnknownCountryError(GuessError):
    title = "Invalid country"


class AlreadyGuessedError(GuessError):
    title = "Already guessed"


class GameSession:
    """One day's game: the target, the guesses so far and the outcome."""

    def __init__(self, target: Country, index: CountryIndex, max_guesses=MAX_GUESSES,
                 guesses: Iterable[GuessRecord] = ()):
        self.target = target
        self.index = index
        self.max_guesses = max_guesses
        self._guesses = list(guesses)

    @property
    def guesses(self) -> Tuple[GuessRecord, ...]:
        return tuple(self._guesses)

    @property
    def won(self):
        target = normalize_name(self.target.name)
        return any(normalize_name(g.guess) == target for g in self._guesses)

    @property
    def game_over(self):
        return self.won or len(self._guesses) >= self.max_guesses

    @property
    def remaining(self):
        return max(self.max_guesses - len(self._guesses), 0)

    def already_guessed(self, name):
        key = normalize_name(name)
        return any(normalize_name(g.guess) == key for g in self._guesses)

    def submit(self, name) -> GuessRecord:
        if self.game_over:
            raise GameOverError(f"The country was {self.target.name}.")
        if not normalize_name(name):
            raise EmptyGuessError("Please enter a country name.")
        country = self.index.find(name)
        if country is None:
            raise UnknownCountryError(f"{name.strip()!r} is not a country we know.")
        if self.already_guessed(country.name):
            raise AlreadyGuessedError(
                f"You've already guessed {country.name}. Try a different country!"
            )

        record = score_countries(self.target, country)
        is_target = normalize_name(country.name) == normalize_name(self.target.name)
        if record.tier is Tier.CORRECT and not is_target:
            # two countries can share a centroid; only the target counts as correct
            logger.warning("%s has the same centroid as the target", country.name)
            record = record._replace(tier=Tier.VERY_CLOSE)
        self._guesses.append(record)

        logger.info(
            "Guess %d/%d: %s (%.0f km, %s)",
            len(self._guesses), self.max_guesses, country.name, record.distance_km, record.tier.value,
        )
        return record
