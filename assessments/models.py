# assessments/models.py
from django.db import models

from crm.models import Person
from exams.models import Exam


class ExamResult(models.Model):
    """
    The graded outcome of one candidate's single attempt at an exam.
    Append-only: written once at submission, never edited.
    """
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='results')
    person = models.ForeignKey(Person, on_delete=models.CASCADE, related_name='exam_results')

    score = models.PositiveIntegerField()
    is_passed = models.BooleanField()

    # Per-question audit trail, see assessments.grading.grade_question
    answers = models.JSONField(default=list)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        # One attempt per candidate; this index is what stops concurrent double submissions
        constraints = [
            models.UniqueConstraint(fields=['exam', 'person'], name='unique_exam_result_per_person'),
        ]

    def __str__(self):
        return f"{self.person} - {self.exam.title} ({self.score})"
