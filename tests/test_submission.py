import pytest

from assessments.models import ExamResult
from assessments.services import FAIL_MESSAGE, PASS_MESSAGE, submit_exam
from cores.exceptions import AlreadyCompleted
from cores.models import AuditLog
from crm.models import Person

pytestmark = pytest.mark.django_db

SUBMIT_URL = '/api/exams/submit/'


def payload(exam, answers=None, **student):
    info = {'firstName': 'Ada', 'lastName': 'Yılmaz', 'email': 'ada@example.com'}
    info.update(student)
    return {'examId': exam.pk, 'studentInfo': info, 'answers': answers or {}}


def correct_answers(questions):
    return {
        str(questions['MULTIPLE_CHOICE'].pk): 'A',
        str(questions['TRUE_FALSE'].pk): 'Doğru',
        str(questions['SHORT_ANSWER'].pk): ' paris ',
        str(questions['ESSAY'].pk): 'Global Interpreter Lock ...',
    }


def test_score_equal_to_passing_score_passes(api_client, system_owner, graded_exam, questions):
    response = api_client.post(SUBMIT_URL, payload(graded_exam, correct_answers(questions)), format='json')

    assert response.status_code == 201
    body = response.json()
    result = ExamResult.objects.get()
    assert body == {
        'resultId': result.pk,
        'score': 50,
        'totalScore': 100,
        'passingScore': 50,
        'isPassed': True,
        'message': PASS_MESSAGE,
    }


def test_result_keeps_per_question_audit(api_client, system_owner, graded_exam, questions):
    api_client.post(SUBMIT_URL, payload(graded_exam, correct_answers(questions)), format='json')

    entries = {e['question_type']: e for e in ExamResult.objects.get().answers}
    assert entries['SHORT_ANSWER']['student_answer'] == ' paris '
    assert entries['SHORT_ANSWER']['earned_points'] == 10
    assert entries['ESSAY']['earned_points'] == 0
    assert entries['ESSAY']['needs_review'] is True
    assert entries['MULTIPLE_CHOICE']['correct_answer'] == 'A'


def test_empty_answers_fail(api_client, system_owner, graded_exam):
    response = api_client.post(SUBMIT_URL, payload(graded_exam), format='json')

    assert response.status_code == 201
    assert response.json()['score'] == 0
    assert response.json()['isPassed'] is False
    assert response.json()['message'] == FAIL_MESSAGE


def test_unknown_candidate_is_created_by_system_owner(api_client, system_owner, graded_exam):
    api_client.post(SUBMIT_URL, payload(graded_exam, email='Yeni@Example.com'), format='json')

    person = Person.objects.get()
    assert person.email == 'yeni@example.com'
    assert person.created_by == system_owner
    assert person.is_active


def test_known_candidate_is_reused(api_client, graded_exam, person):
    api_client.post(SUBMIT_URL, payload(graded_exam, email='ADA@example.com', firstName='Başka'), format='json')

    assert Person.objects.count() == 1
    assert ExamResult.objects.get().person == person


def test_second_submission_is_refused(api_client, system_owner, graded_exam, questions):
    first = api_client.post(SUBMIT_URL, payload(graded_exam, correct_answers(questions)), format='json')
    second = api_client.post(SUBMIT_URL, payload(graded_exam), format='json')

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {'error': 'Bu sınavı daha önce tamamladınız', 'code': 'already_completed'}
    assert ExamResult.objects.get().score == 50


def test_database_constraint_refuses_duplicate(system_owner, graded_exam):
    student = {'first_name': 'Ada', 'last_name': 'Yılmaz', 'email': 'ada@example.com'}
    submit_exam(graded_exam.pk, student, {})

    with pytest.raises(AlreadyCompleted):
        submit_exam(graded_exam.pk, student, {})

    assert ExamResult.objects.count() == 1


def test_candidate_created_concurrently_is_reused(monkeypatch, graded_exam, person):
    lookup = Person.objects.by_email
    calls = []

    def miss_first_lookup(email):
        # The other submission inserts the person right after this lookup
        calls.append(email)
        return None if len(calls) == 1 else lookup(email)

    monkeypatch.setattr(Person.objects, 'by_email', miss_first_lookup)

    student = {'first_name': 'Ada', 'last_name': 'Yılmaz', 'email': 'ada@example.com'}
    result = submit_exam(graded_exam.pk, student, {})

    assert result.person == person
    assert Person.objects.count() == 1
    assert len(calls) == 2


@pytest.mark.parametrize('broken', [
    {'studentInfo': {'firstName': '', 'lastName': 'Yılmaz', 'email': 'ada@example.com'}},
    {'studentInfo': {'firstName': 'Ada', 'lastName': 'Yılmaz', 'email': 'not-an-email'}},
    {'studentInfo': {'firstName': 'Ada', 'email': 'ada@example.com'}},
    {'examId': None},
    {'answers': ['A', 'B']},
])
def test_malformed_submission(api_client, system_owner, graded_exam, broken):
    body = payload(graded_exam)
    body.update(broken)

    response = api_client.post(SUBMIT_URL, body, format='json')

    assert response.status_code == 400
    assert response.json()['code'] == 'invalid'
    assert 'details' in response.json()
    assert not Person.objects.exists()
    assert not ExamResult.objects.exists()


def test_missing_answers_field(api_client, system_owner, graded_exam):
    body = payload(graded_exam)
    del body['answers']

    assert api_client.post(SUBMIT_URL, body, format='json').status_code == 400


def test_unknown_exam(api_client, system_owner, graded_exam):
    response = api_client.post(SUBMIT_URL, {**payload(graded_exam), 'examId': 999999}, format='json')

    assert response.status_code == 404
    assert response.json()['code'] == 'exam_not_found'


def test_inactive_exam_refuses_submissions(api_client, system_owner, graded_exam):
    graded_exam.is_active = False
    graded_exam.save()

    response = api_client.post(SUBMIT_URL, payload(graded_exam), format='json')

    assert response.status_code == 404
    assert not Person.objects.exists()


def test_missing_system_owner(api_client, graded_exam):
    response = api_client.post(SUBMIT_URL, payload(graded_exam), format='json')

    assert response.status_code == 500
    assert response.json()['code'] == 'system_misconfigured'
    assert not Person.objects.exists()
    assert not ExamResult.objects.exists()


def test_submission_is_audited(api_client, system_owner, graded_exam):
    api_client.post(SUBMIT_URL, payload(graded_exam), format='json')

    log = AuditLog.objects.get(action='SUBMIT')
    assert log.actor is None
    assert log.target_model == 'ExamResult'
    assert graded_exam.exam_code in log.details
