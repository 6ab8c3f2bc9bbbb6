from django.contrib import admin

from .models import ExamResult


@admin.register(ExamResult)
class ExamResultAdmin(admin.ModelAdmin):
    list_display = ('exam', 'person', 'score', 'is_passed', 'created_at')
    list_filter = ('is_passed', 'exam')
    readonly_fields = ('exam', 'person', 'score', 'is_passed', 'answers', 'created_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
