"""
Exam/question mutations.

Every change to a question's points moves the parent exam's `total_score` by
the same amount inside one transaction, with the exam row locked, so the
total always equals the sum of the question points. Views must go through
these functions rather than saving Question rows directly.
"""
import logging
import secrets

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import IntegrityError, transaction
from django.db.models import F, Max

from cores.exceptions import (
    ExamCodeExhausted, ExamNotFound, ImportValidationError,
    QuestionNotFound, QuestionOrderConflict,
)
from .importer import validate_rows
from .models import Exam, Question

logger = logging.getLogger(__name__)

# No 0/O or 1/I, so codes survive being read aloud or copied by hand
EXAM_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'

# The only question fields that may reach a candidate
PUBLIC_QUESTION_FIELDS = ('id', 'question_text', 'question_type', 'options', 'points', 'order')


def generate_exam_code(length=None):
    length = length or settings.EXAM_CODE_LENGTH
    max_length = Exam._meta.get_field('exam_code').max_length
    if not 1 <= length <= max_length:
        raise ImproperlyConfigured(f"EXAM_CODE_LENGTH must be between 1 and {max_length}, got {length}")
    return ''.join(secrets.choice(EXAM_CODE_ALPHABET) for _ in range(length))


def create_exam(**fields):
    """
    Create an exam with a fresh unique code.

    The unique index on `exam_code` is what guarantees uniqueness; the
    exists() check only saves a round trip in the common collision case.
    """
    fields.pop('total_score', None)
    max_attempts = settings.EXAM_CODE_MAX_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        code = generate_exam_code()
        if Exam.objects.filter(exam_code=code).exists():
            logger.info(f"Exam code collision on attempt {attempt}/{max_attempts}")
            continue
        try:
            with transaction.atomic():
                exam = Exam.objects.create(exam_code=code, total_score=0, **fields)
        except IntegrityError:
            if not Exam.objects.filter(exam_code=code).exists():
                raise
            logger.info(f"Exam code {code} taken concurrently (attempt {attempt}/{max_attempts})")
            continue
        logger.info(f"Created exam {exam.pk} with code {exam.exam_code}")
        return exam

    logger.error(f"Could not allocate a unique exam code after {max_attempts} attempts")
    raise ExamCodeExhausted()


def _lock_exam(exam_id):
    try:
        return Exam.objects.select_for_update().get(pk=exam_id)
    except Exam.DoesNotExist:
        raise ExamNotFound()


def _next_order(exam):
    current = exam.questions.aggregate(max_order=Max('order'))['max_order']
    return (current or 0) + 1


def _shift_total(exam, delta):
    if delta:
        Exam.objects.filter(pk=exam.pk).update(total_score=F('total_score') + delta)


def add_question(exam_id, data):
    """Append one question (or place it at data['order']) and grow the exam total."""
    data = dict(data)
    with transaction.atomic():
        exam = _lock_exam(exam_id)
        order = data.pop('order', None)
        if order is None:
            order = _next_order(exam)
        try:
            with transaction.atomic():
                question = Question.objects.create(exam=exam, order=order, **data)
        except IntegrityError:
            raise QuestionOrderConflict()
        _shift_total(exam, question.points)

    logger.info(f"Added question {question.pk} to exam {exam.pk} (+{question.points} points)")
    return question


def import_questions(exam_id, rows):
    """
    Validate all rows, then insert them in one transaction.
    Any invalid row aborts the whole batch with the complete error list.
    """
    questions, errors = validate_rows(rows)
    if errors:
        logger.info(f"Import into exam {exam_id} rejected with {len(errors)} errors")
        raise ImportValidationError(errors)

    with transaction.atomic():
        exam = _lock_exam(exam_id)
        next_order = _next_order(exam)
        objects = []
        for data in questions:
            order = data.pop('order')
            if order is None:
                order = next_order
                next_order += 1
            objects.append(Question(exam=exam, order=order, **data))

        try:
            with transaction.atomic():
                Question.objects.bulk_create(objects)
        except IntegrityError:
            raise QuestionOrderConflict()

        total_points = sum(q.points for q in objects)
        _shift_total(exam, total_points)

    logger.info(f"Imported {len(objects)} questions into exam {exam.pk} (+{total_points} points)")
    return len(objects), total_points


def _exam_id_of(question_id):
    exam_id = Question.objects.filter(pk=question_id).values_list('exam_id', flat=True).first()
    if exam_id is None:
        raise QuestionNotFound()
    return exam_id


def _lock_question(exam, question_id):
    # Exam is always locked before its questions
    try:
        return Question.objects.select_for_update().get(pk=question_id, exam=exam)
    except Question.DoesNotExist:
        raise QuestionNotFound()


def update_question(question_id, data):
    with transaction.atomic():
        exam = _lock_exam(_exam_id_of(question_id))
        question = _lock_question(exam, question_id)
        old_points = question.points

        for field, value in data.items():
            setattr(question, field, value)
        try:
            with transaction.atomic():
                question.save()
        except IntegrityError:
            raise QuestionOrderConflict()

        _shift_total(exam, question.points - old_points)

    return question


def delete_question(question_id):
    with transaction.atomic():
        exam = _lock_exam(_exam_id_of(question_id))
        question = _lock_question(exam, question_id)
        points = question.points
        question.delete()
        _shift_total(exam, -points)

    logger.info(f"Deleted question {question_id} from exam {exam.pk} (-{points} points)")


def delete_all_questions(exam_id):
    with transaction.atomic():
        exam = _lock_exam(exam_id)
        count, _ = Question.objects.filter(exam=exam).delete()
        Exam.objects.filter(pk=exam.pk).update(total_score=0)

    logger.info(f"Deleted all {count} questions of exam {exam_id}")
    return count


def get_public_exam(exam_code):
    """Active exam by its code; inactive and unknown codes look the same."""
    exam = Exam.objects.filter(exam_code=(exam_code or '').strip().upper(), is_active=True).first()
    if exam is None:
        raise ExamNotFound()
    return exam


def public_exam_projection(exam):
    """Exam metadata plus ordered questions, built without ever loading the answer key."""
    questions = list(exam.questions.order_by('order').values(*PUBLIC_QUESTION_FIELDS))
    return {
        'id': exam.pk,
        'exam_code': exam.exam_code,
        'title': exam.title,
        'description': exam.description,
        'exam_date': exam.exam_date,
        'duration': exam.duration,
        'total_score': exam.total_score,
        'passing_score': exam.passing_score,
        'questions': questions,
    }
