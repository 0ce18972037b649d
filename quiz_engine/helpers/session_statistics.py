from typing import Dict, List, Optional, Sequence

from quiz_engine.models import Quiz, Submission


def _question_entry(question_id, position: int) -> Dict:
    return {
        "question_id": question_id,
        "position": position,
        "total_answers": 0,
        "correct_count": 0,
        "option_counts": {},
    }


def _seed_from_quiz(quiz: Quiz) -> Dict:
    stats: Dict = {}
    for question in quiz.questions:
        entry = stats[question.id] = _question_entry(question.id, question.position or 0)
        entry["option_counts"] = {str(opt.id): 0 for opt in question.options}
    return stats


def aggregate_question_stats(
    submissions: Sequence[Submission],
    quiz: Optional[Quiz] = None,
) -> List[Dict]:
    """
    Per-question counts over the given submissions, in question order.

    With ``quiz`` given, every question and option of the definition is
    listed even when nobody answered or chose it. Questions only found in
    stored answers (the quiz was replaced or deleted) are listed as well.

    A question counts as correct only when the chosen set equals the
    correct set exactly, independent of the partial credit awarded.
    """
    stats: Dict = _seed_from_quiz(quiz) if quiz is not None else {}

    for submission in submissions:
        for answer in submission.answers:
            entry = stats.get(answer.question_id)
            if entry is None:
                entry = stats[answer.question_id] = _question_entry(
                    answer.question_id, answer.position
                )

            if not answer.answered:
                continue

            entry["total_answers"] += 1

            for option_id in answer.chosen_option_ids:
                entry["option_counts"][option_id] = entry["option_counts"].get(option_id, 0) + 1

            if set(answer.chosen_option_ids) == set(answer.correct_option_ids):
                entry["correct_count"] += 1

    return sorted(stats.values(), key=lambda e: e["position"])


def exact_percent(entry: Dict) -> Optional[int]:
    """Share of exact answers as a whole percent, rounded half up."""
    total = entry["total_answers"]
    if not total:
        return None
    return (200 * entry["correct_count"] + total) // (2 * total)


def aggregate_session_statistics(
    submissions: Sequence[Submission],
    quiz: Optional[Quiz] = None,
) -> Dict:
    participant_count = len(submissions)

    average_score = None
    if participant_count:
        average_score = round(sum(s.score for s in submissions) / participant_count, 2)

    return {
        "participant_count": participant_count,
        "average_score": average_score,
        "per_question": aggregate_question_stats(submissions, quiz),
    }
