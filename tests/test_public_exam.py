from decimal import Decimal

import pytest

from assessments.models import ExamResult
from crm.models import Course, Person, Registration

pytestmark = pytest.mark.django_db


def public_url(code):
    return f'/api/exams/public/{code}/'


def test_public_exam_is_served_without_answer_keys(api_client, graded_exam, questions):
    response = api_client.get(public_url(graded_exam.exam_code))

    assert response.status_code == 200
    body = response.json()
    assert body['examCode'] == graded_exam.exam_code
    assert body['totalScore'] == 100
    assert body['passingScore'] == 50
    assert body['duration'] == 30
    assert [q['order'] for q in body['questions']] == [1, 2, 3, 4]
    assert set(body['questions'][0]) == {'id', 'questionText', 'questionType', 'options', 'points', 'order'}
    assert body['questions'][0]['options'] == {'A': 'Ankara', 'B': 'İstanbul', 'C': 'İzmir'}

    raw = response.content.decode()
    assert 'correctAnswer' not in raw
    assert 'correct_answer' not in raw
    assert questions['SHORT_ANSWER'].correct_answer not in raw
    assert questions['ESSAY'].correct_answer not in raw


def test_code_is_case_insensitive(api_client, exam):
    response = api_client.get(public_url(exam.exam_code.lower()))
    assert response.status_code == 200


def test_unknown_and_inactive_exams_look_the_same(api_client, exam):
    unknown = api_client.get(public_url('ZZZZZZZZ'))

    exam.is_active = False
    exam.save()
    inactive = api_client.get(public_url(exam.exam_code))

    assert unknown.status_code == inactive.status_code == 404
    assert unknown.json() == inactive.json() == {
        'error': 'Sınav bulunamadı veya aktif değil',
        'code': 'exam_not_found',
    }


def test_public_exam_ignores_credentials(api_client, exam):
    api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-real-token')
    assert api_client.get(public_url(exam.exam_code)).status_code == 200


# --- eligibility (?email=) ---

def test_eligible_candidate(api_client, exam, paid_registration):
    response = api_client.get(public_url(exam.exam_code), {'email': ' ADA@example.com '})
    assert response.status_code == 200


def test_unknown_candidate(api_client, exam):
    response = api_client.get(public_url(exam.exam_code), {'email': 'yok@example.com'})

    assert response.status_code == 404
    assert response.json()['code'] == 'candidate_unknown'


def test_candidate_without_registration(api_client, exam, person):
    response = api_client.get(public_url(exam.exam_code), {'email': person.email})

    assert response.status_code == 403
    assert response.json()['code'] == 'not_registered'


def test_cancelled_registration_does_not_count(api_client, exam, paid_registration):
    paid_registration.status = Registration.Status.CANCELLED
    paid_registration.save()

    response = api_client.get(public_url(exam.exam_code), {'email': paid_registration.person.email})

    assert response.status_code == 403


def test_partial_payment(api_client, exam, person, course):
    Registration.objects.create(
        person=person, course=course, status=Registration.Status.CONFIRMED,
        total_amount=Decimal('1500.00'), paid_amount=Decimal('500.00'),
    )

    response = api_client.get(public_url(exam.exam_code), {'email': person.email})

    assert response.status_code == 402
    assert response.json()['code'] == 'payment_incomplete'


def test_registration_for_other_course(api_client, exam, person):
    other = Course.objects.create(name='Veri Bilimi', code='DS-201')
    Registration.objects.create(
        person=person, course=other, total_amount=Decimal('10'), paid_amount=Decimal('10'),
    )

    response = api_client.get(public_url(exam.exam_code), {'email': person.email})

    assert response.status_code == 403


def test_already_completed(api_client, exam, paid_registration):
    ExamResult.objects.create(exam=exam, person=paid_registration.person, score=0, is_passed=False)

    response = api_client.get(public_url(exam.exam_code), {'email': paid_registration.person.email})

    assert response.status_code == 409
    assert response.json() == {'error': 'Bu sınavı daha önce tamamladınız', 'code': 'already_completed'}
    assert Person.objects.count() == 1
