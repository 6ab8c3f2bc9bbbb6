import math

from django.db.models import Avg, Count, Q
from django.http import HttpResponse
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from assessments.models import ExamResult
from assessments.serializers import ExamResultSerializer
from cores.exceptions import ImportValidationError
from cores.models import AuditLog
from .importer import build_template, parse_questions_csv
from .models import Exam, Question
from .permissions import IsExamManager
from .serializers import (
    ExamSerializer, ExamDetailSerializer, QuestionSerializer, QuestionImportSerializer,
)
from .services import delete_all_questions, delete_question, import_questions


def _round_half_up(value):
    return int(math.floor(value + 0.5))


class ExamViewSet(viewsets.ModelViewSet):
    queryset = Exam.objects.select_related('course').order_by('-exam_date')
    permission_classes = [IsExamManager]

    # Enable search on title, code and description
    filter_backends = [filters.SearchFilter]
    search_fields = ['title', 'exam_code', 'description']

    def get_queryset(self):
        queryset = super().get_queryset()
        # Filter by Course if provided ?course=1
        course_id = self.request.query_params.get('course')
        if course_id:
            queryset = queryset.filter(course_id=course_id)
        return queryset

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ExamDetailSerializer
        return ExamSerializer

    def perform_create(self, serializer):
        exam = serializer.save()
        AuditLog.record(self.request, 'CREATE', exam, f"Created exam {exam.title} ({exam.exam_code})")

    def perform_update(self, serializer):
        exam = serializer.save()
        AuditLog.record(self.request, 'UPDATE', exam, f"Updated exam {exam.title} ({exam.exam_code})")

    def perform_destroy(self, instance):
        AuditLog.record(self.request, 'DELETE', instance, f"Deleted exam {instance.title} ({instance.exam_code})")
        # Questions and results go with it (CASCADE)
        instance.delete()

    @action(detail=True, methods=['get', 'post', 'delete'], url_path='questions')
    def questions(self, request, pk=None):
        """
        GET: the exam's questions in order, answer keys included.
        POST: add one question (appended unless `order` is given).
        DELETE: remove every question and reset the exam total to 0.
        """
        exam = self.get_object()

        if request.method == 'GET':
            serializer = QuestionSerializer(exam.questions.order_by('order'), many=True)
            return Response(serializer.data)

        if request.method == 'DELETE':
            count = delete_all_questions(exam.pk)
            AuditLog.record(request, 'DELETE', exam, f"Deleted all {count} questions")
            return Response({"status": f"{count} soru silindi", "count": count})

        serializer = QuestionSerializer(data=request.data, context={'exam': exam, 'request': request})
        serializer.is_valid(raise_exception=True)
        question = serializer.save()
        AuditLog.record(request, 'CREATE', question, f"Added question to exam {exam.exam_code} ({question.points} points)")
        return Response(QuestionSerializer(question).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='import')
    def bulk_import(self, request, pk=None):
        """
        Bulk import. Accepts either a CSV upload in the `file` field or a JSON
        body {"questions": [{"questionText": ..., "questionType": ..., ...}]}.
        Nothing is saved unless every row is valid.
        """
        exam = self.get_object()

        file_obj = request.FILES.get('file')
        if file_obj:
            try:
                text = file_obj.read().decode('utf-8')
            except UnicodeDecodeError:
                raise ImportValidationError(['Dosya UTF-8 kodlamalı bir CSV olmalıdır'])
            rows = parse_questions_csv(text)
        else:
            serializer = QuestionImportSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            rows = serializer.validated_data['questions']

        count, total_points = import_questions(exam.pk, rows)
        AuditLog.record(request, 'IMPORT', exam, f"Imported {count} questions (+{total_points} points)")

        return Response({
            "status": f"{count} soru başarıyla içe aktarıldı",
            "count": count,
            "total_points": total_points,
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='import/template')
    def import_template(self, request, pk=None):
        self.get_object()
        response = HttpResponse(build_template(), content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = 'attachment; filename="soru-sablonu.csv"'
        return response

    @action(detail=True, methods=['get'], url_path='results')
    def results(self, request, pk=None):
        """All results of the exam, newest first, with pass/fail statistics."""
        exam = self.get_object()
        results = ExamResult.objects.filter(exam=exam).select_related('person').order_by('-created_at')

        agg = results.aggregate(
            total=Count('id'),
            passed=Count('id', filter=Q(is_passed=True)),
            average=Avg('score'),
        )
        total = agg['total']
        stats = {
            "total": total,
            "passed": agg['passed'],
            "failed": total - agg['passed'],
            "average_score": _round_half_up(agg['average']) if total else 0,
            "pass_rate": _round_half_up(agg['passed'] * 100 / total) if total else 0,
        }

        return Response({
            "exam": ExamSerializer(exam).data,
            "stats": stats,
            "results": ExamResultSerializer(results, many=True).data,
        })


class QuestionViewSet(mixins.RetrieveModelMixin,
                      mixins.UpdateModelMixin,
                      mixins.DestroyModelMixin,
                      viewsets.GenericViewSet):
    """Single-question access; listing and creation live under /exams/{id}/questions/."""
    queryset = Question.objects.select_related('exam')
    serializer_class = QuestionSerializer
    permission_classes = [IsExamManager]

    def perform_update(self, serializer):
        question = serializer.save()
        AuditLog.record(self.request, 'UPDATE', question, f"Updated question in exam {question.exam.exam_code}")

    def perform_destroy(self, instance):
        AuditLog.record(self.request, 'DELETE', instance, f"Deleted question from exam {instance.exam.exam_code} (-{instance.points} points)")
        delete_question(instance.pk)
