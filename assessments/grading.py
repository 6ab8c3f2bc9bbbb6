"""
Deterministic auto-grading.

Rules per question type:
- MULTIPLE_CHOICE / TRUE_FALSE: exact, case-sensitive match with the key.
- SHORT_ANSWER: match after trimming and case-folding both sides.
- ESSAY: never auto-graded; 0 points and flagged for manual review.
An unanswered question (missing, null or empty) earns 0 points.
"""
from exams.models import Question

QuestionType = Question.QuestionType


def is_correct(question_type, correct_answer, answer):
    if answer is None:
        return False
    if question_type in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE):
        return answer == correct_answer
    if question_type == QuestionType.SHORT_ANSWER:
        return answer.strip().casefold() == correct_answer.strip().casefold()
    # ESSAY (and anything unknown) needs a human
    return False


def _submitted_answer(answers, question_id):
    answer = answers.get(str(question_id), answers.get(question_id))
    if answer is None or answer == '':
        return None
    return str(answer)


def grade_question(question, answers):
    """Audit entry for one question: what was sent, what was expected, what it earned."""
    answer = _submitted_answer(answers, question.id)
    correct = is_correct(question.question_type, question.correct_answer, answer)
    return {
        'question_id': question.id,
        'question_type': question.question_type,
        'student_answer': answer,
        'correct_answer': question.correct_answer,
        'is_correct': correct,
        'earned_points': question.points if correct else 0,
        'max_points': question.points,
        'needs_review': question.question_type == QuestionType.ESSAY,
    }


def grade_answers(questions, answers):
    """Grade every question independently. Returns (score, audit_entries)."""
    entries = [grade_question(question, answers) for question in questions]
    score = sum(entry['earned_points'] for entry in entries)
    return score, entries
