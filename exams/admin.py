from django.contrib import admin

from .models import Exam, Question


class QuestionInline(admin.TabularInline):
    # Read-only: question changes go through the API so the exam total stays in sync
    model = Question
    extra = 0
    can_delete = False
    fields = ('order', 'question_text', 'question_type', 'correct_answer', 'points')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ('exam_code', 'title', 'course', 'exam_date', 'total_score', 'passing_score', 'is_active')
    list_filter = ('is_active', 'course')
    search_fields = ('title', 'exam_code')
    readonly_fields = ('exam_code', 'total_score')
    inlines = [QuestionInline]
