# institute_platform/exams/serializers.py
from django.conf import settings
from rest_framework import serializers

from .models import Exam, Question
from .services import add_question, create_exam, update_question

# --- Question Serializers (administration, includes the answer key) ---

class QuestionSerializer(serializers.ModelSerializer):
    options = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False, allow_null=True)
    points = serializers.IntegerField(min_value=1)
    order = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = Question
        fields = [
            'id', 'exam', 'question_text', 'question_type',
            'options', 'correct_answer', 'points', 'order', 'created_at'
        ]
        read_only_fields = ['exam', 'created_at']

    def validate(self, attrs):
        q_type = attrs.get('question_type', getattr(self.instance, 'question_type', None))
        options = attrs.get('options', getattr(self.instance, 'options', None)) or {}
        correct = attrs.get('correct_answer', getattr(self.instance, 'correct_answer', ''))

        if q_type == Question.QuestionType.MULTIPLE_CHOICE:
            options = {label: text.strip() for label, text in options.items() if text and text.strip()}
            if 'A' not in options or 'B' not in options:
                raise serializers.ValidationError(
                    {'options': 'Çoktan seçmeli sorular için en az A ve B şıkları gereklidir'}
                )
            if correct not in options:
                raise serializers.ValidationError(
                    {'correct_answer': 'Doğru cevap şıklardan biri olmalıdır'}
                )
            attrs['options'] = options
        elif 'options' in attrs or q_type != getattr(self.instance, 'question_type', q_type):
            # Options only mean something for multiple choice
            attrs['options'] = None

        if q_type == Question.QuestionType.TRUE_FALSE and correct not in settings.TRUE_FALSE_CHOICES:
            choices = ' / '.join(settings.TRUE_FALSE_CHOICES)
            raise serializers.ValidationError({'correct_answer': f"Doğru cevap {choices} olmalıdır"})

        return attrs

    def create(self, validated_data):
        return add_question(self.context['exam'].pk, validated_data)

    def update(self, instance, validated_data):
        return update_question(instance.pk, validated_data)


# --- Exam Serializers ---

class ExamSerializer(serializers.ModelSerializer):
    course_name = serializers.CharField(source='course.name', read_only=True)
    duration = serializers.IntegerField(min_value=1)

    # Read-only counts
    question_count = serializers.IntegerField(source='questions.count', read_only=True)
    result_count = serializers.IntegerField(source='results.count', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'exam_code', 'course', 'course_name', 'title', 'description',
            'exam_date', 'duration', 'total_score', 'passing_score', 'is_active',
            'question_count', 'result_count', 'created_at', 'updated_at'
        ]
        # total_score is derived from the questions
        read_only_fields = ['exam_code', 'total_score', 'created_at', 'updated_at']

    def validate(self, attrs):
        if self.instance is not None and self.instance.total_score > 0:
            passing = attrs.get('passing_score', self.instance.passing_score)
            if passing > self.instance.total_score:
                raise serializers.ValidationError(
                    {'passing_score': f"Geçme puanı toplam puanı ({self.instance.total_score}) aşamaz"}
                )
        return attrs

    def create(self, validated_data):
        return create_exam(**validated_data)


class ExamDetailSerializer(ExamSerializer):
    """Detailed view for administrators, answer keys included."""
    questions = QuestionSerializer(many=True, read_only=True)

    class Meta(ExamSerializer.Meta):
        fields = ExamSerializer.Meta.fields + ['questions']


# --- Public projection (candidate-facing) ---
# Built from exams.services.public_exam_projection; there is no answer-key field to fill.

class PublicQuestionSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    questionText = serializers.CharField(source='question_text')
    questionType = serializers.CharField(source='question_type')
    options = serializers.JSONField(allow_null=True)
    points = serializers.IntegerField()
    order = serializers.IntegerField()


class PublicExamSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    examCode = serializers.CharField(source='exam_code')
    title = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    examDate = serializers.DateTimeField(source='exam_date')
    duration = serializers.IntegerField()
    totalScore = serializers.IntegerField(source='total_score')
    passingScore = serializers.IntegerField(source='passing_score')
    questions = PublicQuestionSerializer(many=True)


class QuestionImportSerializer(serializers.Serializer):
    """JSON import body: rows keyed like the CSV template columns."""
    questions = serializers.ListField(child=serializers.DictField(), allow_empty=False)
