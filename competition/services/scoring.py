# competition/services/scoring.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ..exceptions import InvalidSubmission


@dataclass(frozen=True)
class AnswerKey:
    correct_answer: str
    points: int = 1


@dataclass(frozen=True)
class ScoreResult:
    score: int                  # integer percentage, floor of the weighted ratio
    earned_points: int
    possible_points: int
    correctness: dict = field(default_factory=dict)   # question id (str) -> bool

    def passed(self, passing_score: int) -> bool:
        return self.score >= passing_score


def _normalize_choice(value) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().upper()


def score_answers(answer_key: Mapping, answers: Mapping | None, *, is_published: bool = True) -> ScoreResult:
    """
    Score one answer set against a quiz's answer key.

    answer_key: question id -> AnswerKey
    answers:    question id -> chosen option letter

    Ids are compared as strings so JSON payloads and UUID keys line up.
    Unanswered questions count as wrong; ids not in the key are ignored.
    """
    if not is_published:
        raise InvalidSubmission("Quiz is not published.")
    if not answer_key:
        raise InvalidSubmission("Quiz has no questions.")
    if answers is None:
        answers = {}
    if not isinstance(answers, Mapping):
        raise InvalidSubmission("Answers must map question ids to options.")

    submitted = {str(qid): _normalize_choice(choice) for qid, choice in answers.items()}

    possible = 0
    earned = 0
    correctness = {}
    for qid, key in answer_key.items():
        if key.points < 1:
            raise InvalidSubmission(f"Question {qid} has a non-positive weight.")
        possible += key.points
        ok = submitted.get(str(qid), "") == _normalize_choice(key.correct_answer)
        correctness[str(qid)] = ok
        if ok:
            earned += key.points

    return ScoreResult(
        score=(100 * earned) // possible,
        earned_points=earned,
        possible_points=possible,
        correctness=correctness,
    )


def answer_key_for(quiz) -> dict:
    rows = quiz.questions.values_list("id", "correct_answer", "points")
    return {str(qid): AnswerKey(correct_answer=ans, points=pts) for qid, ans, pts in rows}
