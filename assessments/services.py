import logging

from django.db import IntegrityError, transaction
from django.db.models import Prefetch

from cores.exceptions import (
    AlreadyCompleted, CandidateUnknown, ExamNotFound, NotRegistered,
    PaymentIncomplete, SystemOwnerMissing,
)
from crm.models import Person, Registration
from exams.models import Exam, Question
from users.models import User
from .grading import grade_answers
from .models import ExamResult

logger = logging.getLogger(__name__)

PASS_MESSAGE = 'Tebrikler! Sınavı başarıyla geçtiniz.'
FAIL_MESSAGE = 'Üzgünüz, sınavı geçemediniz.'


def check_eligibility(exam, email):
    """
    Pre-flight for a candidate opening an exam: known person, registered
    and paid for the exam's course, and no earlier result.
    """
    person = Person.objects.by_email(email)
    if person is None:
        raise CandidateUnknown()

    registrations = Registration.objects.for_candidate(person, exam.course_id)
    if not registrations.exists():
        raise NotRegistered()
    if not registrations.filter(payment_status=Registration.PaymentStatus.PAID).exists():
        raise PaymentIncomplete()

    if ExamResult.objects.filter(exam=exam, person=person).exists():
        raise AlreadyCompleted()
    return person


def resolve_candidate(student_info):
    """Find the candidate by email or create a minimal Person owned by the system account."""
    person = Person.objects.by_email(student_info['email'])
    if person is not None:
        return person

    owner = User.system_owner()
    if owner is None:
        raise SystemOwnerMissing()

    try:
        with transaction.atomic():
            person = Person.objects.create(
                first_name=student_info['first_name'],
                last_name=student_info['last_name'],
                email=student_info['email'],
                is_active=True,
                created_by=owner,
            )
    except IntegrityError:
        # Another submission created the same person first
        person = Person.objects.by_email(student_info['email'])
        if person is None:
            raise
        return person

    logger.info(f"Created candidate {person.pk} for {person.email}")
    return person


def load_exam_for_grading(exam_id):
    exam = (
        Exam.objects
        .filter(pk=exam_id, is_active=True)
        .prefetch_related(Prefetch('questions', queryset=Question.objects.order_by('order')))
        .first()
    )
    if exam is None:
        raise ExamNotFound()
    return exam


def submit_exam(exam_id, student_info, answers):
    """
    Grade one submission and store its single ExamResult.

    A second result for the same (exam, person) is refused by the database
    constraint and reported as AlreadyCompleted, including when two
    submissions race each other.
    """
    exam = load_exam_for_grading(exam_id)

    with transaction.atomic():
        person = resolve_candidate(student_info)

        score, entries = grade_answers(exam.questions.all(), answers)
        is_passed = score >= exam.passing_score

        try:
            with transaction.atomic():
                result = ExamResult.objects.create(
                    exam=exam,
                    person=person,
                    score=score,
                    is_passed=is_passed,
                    answers=entries,
                )
        except IntegrityError:
            logger.info(f"Duplicate submission refused for exam {exam.pk} / person {person.pk}")
            raise AlreadyCompleted()

    logger.info(f"Exam {exam.exam_code}: {person.email} scored {score}/{exam.total_score} "
                f"({'passed' if is_passed else 'failed'})")
    return result


def result_message(result):
    return PASS_MESSAGE if result.is_passed else FAIL_MESSAGE
