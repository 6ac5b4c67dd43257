"""
Staff name matching.

Staff attribution in booking messages is typed by hand ("booked by sara",
"Mariam", "Fatma" for "Fatima"), so lookups run through a chain of
increasingly tolerant strategies. The first strategy that finds a match
wins, and within a strategy the directory order breaks ties.
"""

from typing import Callable, List, Optional, Sequence
from rapidfuzz.distance import Levenshtein

MatchStrategy = Callable[[str, Sequence[str]], Optional[str]]


def _first_token(name: str) -> str:
    parts = name.split()
    return parts[0] if parts else ""


def exact_match(candidate: str, directory: Sequence[str]) -> Optional[str]:
    """Case-insensitive full-name equality."""
    needle = candidate.casefold()
    for full_name in directory:
        if full_name.casefold() == needle:
            return full_name
    return None


def partial_match(candidate: str, directory: Sequence[str]) -> Optional[str]:
    """Substring in either direction, or equal first names."""
    needle = candidate.casefold()
    first = _first_token(needle)
    for full_name in directory:
        hay = full_name.casefold()
        if len(needle) >= 3 and needle in hay:
            return full_name
        if hay in needle:
            return full_name
        if first and first == _first_token(hay):
            return full_name
    return None


def fuzzy_first_name_match(candidate: str, directory: Sequence[str]) -> Optional[str]:
    """Edit distance between first names: at most 1 for short names, else 2."""
    first = _first_token(candidate.casefold())
    if not first:
        return None
    for full_name in directory:
        target = _first_token(full_name.casefold())
        if not target:
            continue
        threshold = 1 if len(target) <= 3 else 2
        if Levenshtein.distance(first, target, score_cutoff=threshold) <= threshold:
            return full_name
    return None


DEFAULT_STRATEGIES: List[MatchStrategy] = [exact_match, partial_match, fuzzy_first_name_match]

# Shorter words ("for", "and") sit within one or two edits of common short names
MIN_FUZZY_TOKEN_LENGTH = 4


class StaffNameMatcher:
    """Resolve free-text staff references to canonical directory names."""

    def __init__(self, strategies: Optional[List[MatchStrategy]] = None):
        self.strategies = strategies or list(DEFAULT_STRATEGIES)

    def match(self, candidate: Optional[str], directory: Sequence[str]) -> Optional[str]:
        """
        Match a candidate name against the staff directory.

        Args:
            candidate: Name as written in the message
            directory: Full names of booking-capable staff, in directory order

        Returns:
            Canonical full name from the directory, or None
        """
        if not candidate or not candidate.strip() or not directory:
            return None
        candidate = " ".join(candidate.split())
        for strategy in self.strategies:
            found = strategy(candidate, directory)
            if found:
                return found
        return None

    @staticmethod
    def match_token(token: str, directory: Sequence[str]) -> Optional[str]:
        """
        Match a single word taken from free text.

        The word must equal one part of a staff name. Words of four or more
        letters may also be a near miss of a first name ("Fatma"). Substrings
        never count, so "Ali" is not found inside "hydrafacial".
        """
        needle = token.casefold()
        for full_name in directory:
            if needle in full_name.casefold().split():
                return full_name
        if len(needle) >= MIN_FUZZY_TOKEN_LENGTH:
            return fuzzy_first_name_match(needle, directory)
        return None

    def find_in_lines(self, lines: Sequence[str], directory: Sequence[str]) -> Optional[str]:
        """
        Scan free-text lines for a token naming a staff member.

        Lines containing ``:`` belong to other labeled fields and are skipped.
        Tokens shorter than three letters are never tried.
        """
        for line in lines:
            if ":" in line:
                continue
            for token in line.split():
                token = token.strip(".,;!?()[]\"'")
                if len(token) < 3 or not token.isalpha():
                    continue
                found = self.match_token(token, directory)
                if found:
                    return found
        return None
