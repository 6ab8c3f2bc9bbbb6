from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter

# Import Views
from users.views import CustomLoginView
from exams.views import ExamViewSet, QuestionViewSet
from assessments.views import PublicExamView, SubmitExamView
from cores.views import AuditLogListView

# Router
router = DefaultRouter()
router.register(r'exams', ExamViewSet, basename='exams')
router.register(r'questions', QuestionViewSet, basename='questions')

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication ---
    path('api/auth/login/', CustomLoginView.as_view(), name='login'),

    # --- Public Exam Flow (no account needed) ---
    path('api/exams/public/<str:exam_code>/', PublicExamView.as_view(), name='public-exam'),
    path('api/exams/submit/', SubmitExamView.as_view(), name='submit-exam'),

    # --- Admin Audit Trail ---
    path('api/audit-logs/', AuditLogListView.as_view(), name='audit-logs'),

    # --- Standard API Routes ---
    path('api/', include(router.urls)),
]
