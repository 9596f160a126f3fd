"""Character-level scoring of a dictation attempt against its reference.

The learner's own text is what gets displayed, annotated character by
character.  Characters the learner typed that do not belong are shown
as wrong; characters they left out are not shown at all and only cost
points through the lower score.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from diff_match_patch import diff_match_patch


@dataclass(frozen=True)
class CharacterDiff:
    char: str
    correct: bool

    def to_dict(self) -> dict:
        return {"char": self.char, "correct": self.correct}


@dataclass(frozen=True)
class ScoreResult:
    diff: list[CharacterDiff]
    score: int
    correct_chars: int
    total_chars: int

    def diff_dicts(self) -> list[dict]:
        return [c.to_dict() for c in self.diff]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_diff(reference: str, attempt: str) -> ScoreResult:
    """
    Diff *attempt* against *reference* and compute a 0-100 score.

    Operations are read as "how to turn the attempt into the reference":
      - EQUAL:  typed correctly, shown as correct and counted.
      - DELETE: typed but not in the reference, shown as wrong.
      - INSERT: in the reference but never typed, not shown.

    score = round(100 * correct_chars / len(reference)), or 0 for an
    empty reference.  Only EQUAL spans add to correct_chars and they
    can never exceed the reference length, so the score stays in 0-100.
    """
    reference = reference or ""
    attempt = attempt or ""

    dmp = diff_match_patch()
    diffs = dmp.diff_main(attempt, reference)
    dmp.diff_cleanupSemantic(diffs)

    characters: list[CharacterDiff] = []
    correct_chars = 0

    for operation, text in diffs:
        if operation == dmp.DIFF_EQUAL:
            characters.extend(CharacterDiff(char, True) for char in text)
            correct_chars += len(text)
        elif operation == dmp.DIFF_DELETE:
            characters.extend(CharacterDiff(char, False) for char in text)
        # DIFF_INSERT: omitted by the learner, nothing to annotate

    total_chars = len(reference)
    score = _round_half_up(correct_chars / total_chars * 100) if total_chars else 0

    return ScoreResult(
        diff=characters,
        score=score,
        correct_chars=correct_chars,
        total_chars=total_chars,
    )
