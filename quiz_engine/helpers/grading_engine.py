from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping
from uuid import UUID

from quiz_engine.errors import InvalidAnswerError
from quiz_engine.models import Quiz, QuizQuestion


@dataclass
class QuestionGrade:
    question_id: UUID
    position: int
    answered: bool
    chosen_option_ids: List[UUID]
    correct_option_ids: List[UUID]
    points: int
    max_points: int


@dataclass
class QuizGrade:
    questions: List[QuestionGrade] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(q.points for q in self.questions)

    @property
    def max_total(self) -> int:
        return sum(q.max_points for q in self.questions)


def partial_credit(max_points: int, chosen_count: int, correct_count: int) -> int:
    """
    max_points * chosen / correct, rounded half-up to an integer.

    Integer arithmetic keeps the rounding exact: 2/3 of a point is 1,
    1/3 is 0 and 1/2 is 1.
    """
    return (2 * max_points * chosen_count + correct_count) // (2 * correct_count)


def grade_question(
    question: QuizQuestion,
    chosen_ids: Iterable[UUID],
    answered: bool = True,
) -> QuestionGrade:
    """
    Grades one question:
    - any wrong option chosen -> 0 points
    - otherwise proportional credit for the share of correct options chosen

    Option ids that do not belong to the question raise InvalidAnswerError.
    """
    option_ids = [opt.id for opt in question.options]
    correct_ids = [opt.id for opt in question.options if opt.is_correct]

    chosen = set(chosen_ids)
    for option_id in chosen:
        if option_id not in option_ids:
            raise InvalidAnswerError(
                f"Option '{option_id}' does not belong to question '{question.id}'",
                question_id=question.id,
                option_id=option_id,
            )

    max_points = question.marks or 1

    if chosen - set(correct_ids):
        points = 0
    else:
        points = partial_credit(max_points, len(chosen), len(correct_ids))

    return QuestionGrade(
        question_id=question.id,
        position=question.position or 0,
        answered=answered,
        # keep the option order of the definition
        chosen_option_ids=[oid for oid in option_ids if oid in chosen],
        correct_option_ids=correct_ids,
        points=points,
        max_points=max_points,
    )


def grade_quiz(quiz: Quiz, answers: Mapping[UUID, Iterable[UUID]]) -> QuizGrade:
    """
    Grades every question of the quiz against the submitted answers.

    Returns a QuizGrade with one QuestionGrade per question, in question
    order. Questions without an answer count as an empty selection.
    Unknown question ids are rejected rather than skipped.
    """
    question_map: Dict[UUID, QuizQuestion] = {q.id: q for q in quiz.questions}

    for question_id in answers:
        if question_id not in question_map:
            raise InvalidAnswerError(
                f"Question '{question_id}' is not part of this quiz",
                question_id=question_id,
            )

    grade = QuizGrade()
    for question in quiz.questions:
        grade.questions.append(
            grade_question(
                question,
                answers.get(question.id, ()),
                answered=question.id in answers,
            )
        )

    return grade
