# institute_platform/exams/models.py
from django.db import models

from crm.models import Course


class Exam(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='exams')
    # Short code candidates type in to open the exam; see services.generate_exam_code
    exam_code = models.CharField(max_length=16, unique=True, editable=False)

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    exam_date = models.DateTimeField()
    duration = models.PositiveIntegerField(help_text="Duration in minutes")

    # Always equals the sum of the questions' points; maintained by exams.services
    total_score = models.PositiveIntegerField(default=0)
    passing_score = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.exam_code} - {self.title}"


class Question(models.Model):
    class QuestionType(models.TextChoices):
        MULTIPLE_CHOICE = "MULTIPLE_CHOICE", "Çoktan Seçmeli"
        TRUE_FALSE = "TRUE_FALSE", "Doğru / Yanlış"
        SHORT_ANSWER = "SHORT_ANSWER", "Kısa Cevap"
        ESSAY = "ESSAY", "Yazılı (manuel değerlendirme)"

    exam = models.ForeignKey(Exam, related_name='questions', on_delete=models.CASCADE)

    question_text = models.TextField()
    question_type = models.CharField(max_length=20, choices=QuestionType.choices)
    # {"A": "...", "B": "...", ...}; only used by MULTIPLE_CHOICE
    options = models.JSONField(null=True, blank=True)

    # The answer key. Never part of the public projection.
    correct_answer = models.TextField()
    points = models.PositiveIntegerField()
    order = models.PositiveIntegerField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['order']
        constraints = [
            models.UniqueConstraint(fields=['exam', 'order'], name='unique_question_order_per_exam'),
        ]

    def __str__(self):
        return f"{self.order}. {self.question_text[:50]}..."
