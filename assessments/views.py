from rest_framework import permissions, status, views
from rest_framework.response import Response

from cores.models import AuditLog
from exams.serializers import PublicExamSerializer
from exams.services import get_public_exam, public_exam_projection
from .serializers import SubmissionSerializer
from .services import check_eligibility, result_message, submit_exam


# --- PUBLIC CANDIDATE VIEWS (no account, exam code only) ---

class PublicExamView(views.APIView):
    """
    Exam by code with its questions, answer keys left out.
    With ?email=, also checks the candidate may take it.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, exam_code):
        exam = get_public_exam(exam_code)

        email = request.query_params.get('email')
        if email:
            check_eligibility(exam, email)

        serializer = PublicExamSerializer(public_exam_projection(exam))
        return Response(serializer.data)


class SubmitExamView(views.APIView):
    """
    Candidate submits all answers at once.
    Grades immediately and stores the single result for this candidate.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = SubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = submit_exam(data['exam_id'], data['student_info'], data['answers'])
        exam = result.exam

        AuditLog.record(
            request, 'SUBMIT', result,
            f"{result.person.email} submitted {exam.exam_code}: {result.score}/{exam.total_score}"
        )

        return Response({
            "resultId": result.id,
            "score": result.score,
            "totalScore": exam.total_score,
            "passingScore": exam.passing_score,
            "isPassed": result.is_passed,
            "message": result_message(result),
        }, status=status.HTTP_201_CREATED)
