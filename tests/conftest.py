from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from crm.models import Course, Person, Registration
from exams.models import Question
from exams.services import add_question, create_exam
from users.models import User

QT = Question.QuestionType


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def system_owner(db, settings):
    return User.objects.create_user(
        username=settings.SYSTEM_OWNER_EMAIL,
        email=settings.SYSTEM_OWNER_EMAIL,
        password='owner-pass',
        role=User.Role.ADMIN,
        is_staff=True,
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(
        username='egitmen@istanbulinstitute.com',
        email='egitmen@istanbulinstitute.com',
        password='staff-pass',
        first_name='Elif',
        last_name='Kaya',
        is_staff=True,
    )


@pytest.fixture
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture
def course(db):
    return Course.objects.create(name='Python Temelleri', code='PY-101', price=Decimal('1500.00'))


@pytest.fixture
def exam(course):
    return create_exam(
        course=course,
        title='Python Ara Sınav',
        description='Temel konular',
        exam_date=timezone.now(),
        duration=30,
        passing_score=50,
    )


@pytest.fixture
def graded_exam(exam):
    """
    Four questions worth 100 points; answering the three auto-graded ones
    correctly yields exactly the passing score of 50.
    """
    add_question(exam.pk, {
        'question_text': "Türkiye'nin başkenti neresidir?",
        'question_type': QT.MULTIPLE_CHOICE,
        'options': {'A': 'Ankara', 'B': 'İstanbul', 'C': 'İzmir'},
        'correct_answer': 'A',
        'points': 30,
    })
    add_question(exam.pk, {
        'question_text': 'Python yorumlanan bir dildir.',
        'question_type': QT.TRUE_FALSE,
        'correct_answer': 'Doğru',
        'points': 10,
    })
    add_question(exam.pk, {
        'question_text': "Fransa'nın başkenti?",
        'question_type': QT.SHORT_ANSWER,
        'correct_answer': 'Paris',
        'points': 10,
    })
    add_question(exam.pk, {
        'question_text': 'GIL kavramını açıklayınız.',
        'question_type': QT.ESSAY,
        'correct_answer': 'Manuel değerlendirme',
        'points': 50,
    })
    exam.refresh_from_db()
    return exam


@pytest.fixture
def questions(graded_exam):
    """The graded exam's questions keyed by type."""
    return {q.question_type: q for q in graded_exam.questions.all()}


@pytest.fixture
def person(system_owner):
    return Person.objects.create(
        first_name='Ada',
        last_name='Yılmaz',
        email='ada@example.com',
        created_by=system_owner,
    )


@pytest.fixture
def paid_registration(person, course):
    return Registration.objects.create(
        person=person,
        course=course,
        status=Registration.Status.CONFIRMED,
        total_amount=Decimal('1500.00'),
        paid_amount=Decimal('1500.00'),
    )
