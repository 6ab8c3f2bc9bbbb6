"""Error taxonomy shared by the exam apps and the handler that renders it.

Every error leaves the API as ``{"error": <message>, "code": <code>}`` so the
candidate pages can tell conditions apart without parsing messages.
"""
import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied, ValidationError
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


# --- Not found ---

class ExamNotFound(APIException):
    # Same message for deleted, inactive and never-existing exams
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Sınav bulunamadı veya aktif değil'
    default_code = 'exam_not_found'


class QuestionNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Soru bulunamadı'
    default_code = 'question_not_found'


# --- Eligibility ---

class CandidateUnknown(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Bu e-posta adresiyle kayıtlı bir öğrenci bulunamadı'
    default_code = 'candidate_unknown'


class NotRegistered(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Bu sınavın ait olduğu eğitime kaydınız bulunmuyor'
    default_code = 'not_registered'


class PaymentIncomplete(APIException):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = 'Sınava girebilmek için eğitim ödemenizi tamamlamanız gerekiyor'
    default_code = 'payment_incomplete'


# --- Conflicts ---

class AlreadyCompleted(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Bu sınavı daha önce tamamladınız'
    default_code = 'already_completed'


class ExamCodeExhausted(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Benzersiz sınav kodu oluşturulamadı'
    default_code = 'exam_code_exhausted'


class QuestionOrderConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Bu sıra numarası sınavda başka bir soru tarafından kullanılıyor'
    default_code = 'question_order_conflict'


# --- Validation ---

class ImportValidationError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Doğrulama hataları'
    default_code = 'import_invalid'

    def __init__(self, errors, detail=None):
        super().__init__(detail=detail)
        self.errors = list(errors)


# --- Configuration ---

class SystemOwnerMissing(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Sistem hatası: yönetici hesabı bulunamadı'
    default_code = 'system_misconfigured'


def api_exception_handler(exc, context):
    if isinstance(exc, Http404):
        exc = NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, SystemOwnerMissing):
        logger.error("System owner account missing; cannot create candidates (view=%s)",
                     context.get('view').__class__.__name__)

    if isinstance(exc, ValidationError):
        response.data = {
            'error': 'Eksik veya hatalı bilgiler',
            'code': 'invalid',
            'details': exc.detail,
        }
        return response

    codes = exc.get_codes()
    data = {
        'error': str(exc.detail),
        'code': codes if isinstance(codes, str) else exc.default_code,
    }
    if isinstance(exc, ImportValidationError):
        data['validation_errors'] = exc.errors
    response.data = data
    return response
