"""
Races between simultaneous requests. These need a backend with row locks
and concurrent writers (PostgreSQL via DATABASE_URL); SQLite serializes
writes, so there is nothing to race there.
"""
import threading

import pytest
from django.db import connection

from assessments.models import ExamResult
from assessments.services import submit_exam
from cores.exceptions import AlreadyCompleted
from crm.models import Person
from exams import services
from exams.models import Question

pytestmark = [
    pytest.mark.django_db(transaction=True),
    pytest.mark.skipif(
        not connection.features.has_select_for_update,
        reason='database serializes writes',
    ),
]


def run_together(*targets):
    """Start every target at the same moment; return each one's result or exception."""
    barrier = threading.Barrier(len(targets))
    outcomes = [None] * len(targets)

    def runner(index, target):
        try:
            barrier.wait()
            outcomes[index] = target()
        except Exception as e:
            outcomes[index] = e
        finally:
            connection.close()

    threads = [threading.Thread(target=runner, args=(i, t)) for i, t in enumerate(targets)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(30)
    return outcomes


def test_simultaneous_submissions_store_one_result(system_owner, graded_exam, questions):
    student = {'first_name': 'Ada', 'last_name': 'Yılmaz', 'email': 'ada@example.com'}
    answers = {str(questions['MULTIPLE_CHOICE'].pk): 'A'}

    outcomes = run_together(
        lambda: submit_exam(graded_exam.pk, student, answers),
        lambda: submit_exam(graded_exam.pk, student, answers),
    )

    results = [o for o in outcomes if isinstance(o, ExamResult)]
    refused = [o for o in outcomes if isinstance(o, AlreadyCompleted)]
    assert (len(results), len(refused)) == (1, 1)
    assert ExamResult.objects.count() == 1
    assert Person.objects.count() == 1


def test_interleaved_question_changes_keep_total(graded_exam, questions):
    outcomes = run_together(
        lambda: services.delete_question(questions['ESSAY'].pk),
        lambda: services.delete_question(questions['TRUE_FALSE'].pk),
        lambda: services.update_question(questions['SHORT_ANSWER'].pk, {'points': 25}),
        lambda: services.add_question(graded_exam.pk, {
            'question_text': 'Yeni soru', 'question_type': Question.QuestionType.ESSAY,
            'correct_answer': '-', 'points': 7,
        }),
    )

    assert not [o for o in outcomes if isinstance(o, Exception)]
    graded_exam.refresh_from_db()
    assert graded_exam.total_score == sum(q.points for q in graded_exam.questions.all())
    assert graded_exam.total_score == 30 + 25 + 7
