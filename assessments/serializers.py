from rest_framework import serializers

from crm.models import Person
from .models import ExamResult


# --- Public submission contract ---

class StudentInfoSerializer(serializers.Serializer):
    firstName = serializers.CharField(source='first_name', max_length=100)
    lastName = serializers.CharField(source='last_name', max_length=100)
    email = serializers.EmailField()

    def validate_email(self, value):
        return Person.normalize_email(value)


class SubmissionSerializer(serializers.Serializer):
    """
    {"examId": 1, "studentInfo": {...}, "answers": {"<questionId>": "<answer>"}}
    Answers are kept verbatim; whitespace matters for exact-match question types.
    """
    examId = serializers.IntegerField(source='exam_id')
    studentInfo = StudentInfoSerializer(source='student_info')
    answers = serializers.DictField(
        child=serializers.CharField(allow_blank=True, allow_null=True, trim_whitespace=False),
        allow_empty=True,
    )


# --- Administration ---

class CandidateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Person
        fields = ['id', 'first_name', 'last_name', 'email']


class ExamResultSerializer(serializers.ModelSerializer):
    person = CandidateSerializer(read_only=True)

    class Meta:
        model = ExamResult
        fields = ['id', 'exam', 'person', 'score', 'is_passed', 'answers', 'created_at']
        read_only_fields = fields
