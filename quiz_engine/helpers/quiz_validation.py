from quiz_engine.errors import InvalidQuizError
from quiz_engine.models import QuestionType
from quiz_engine.schemas.quiz import QuizCreate


def validate_quiz_definition(quiz_in: QuizCreate) -> None:
    """
    Checks the invariants the grading engine relies on:
    at least one question, two or more options per question, at least one
    correct option, and exactly one for single-choice questions.
    """
    if not quiz_in.questions:
        raise InvalidQuizError("Quiz must have at least one question")

    for idx, q in enumerate(quiz_in.questions):
        if len(q.options) < 2:
            raise InvalidQuizError(
                f"Question {idx + 1}: at least two options are required",
                question_index=idx,
            )

        correct_count = sum(1 for opt in q.options if opt.is_correct)

        if correct_count == 0:
            raise InvalidQuizError(
                f"Question '{q.question_text}' must have at least one correct option",
                question_index=idx,
            )

        if q.question_type == QuestionType.SINGLE and correct_count != 1:
            raise InvalidQuizError(
                f"Question '{q.question_text}' is single choice and needs exactly one correct option",
                question_index=idx,
            )
