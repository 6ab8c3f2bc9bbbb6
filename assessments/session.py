"""
Candidate-side exam session.

Drives the public exam flow against the HTTP API: load the exam by code,
collect identity, count down, keep answers, submit once. The server keeps
no state for an attempt until the submission arrives, so everything here
lives in the candidate's process.

    api = ExamApi('https://crm.example.com')
    session = PublicExamSession(api, 'K7QX2M9A')
    session.load()
    session.set_student_info('Ada', 'Yılmaz', 'ada@example.com')
    session.start()
    session.answer(question_id, 'A')
    session.submit()
"""
import logging
import threading

import requests
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import models

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = 'Sunucuya ulaşılamadı. Lütfen bağlantınızı kontrol edip tekrar deneyin.'


class SessionState(models.TextChoices):
    INFO = "info", "Öğrenci Bilgileri"
    EXAM = "exam", "Sınav"
    COMPLETED = "completed", "Tamamlandı"


class ExamSessionError(Exception):
    """A failure the candidate should see. `code` matches the API error codes."""

    def __init__(self, message, code=None, status=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class ExamApi:
    """Thin client for the two public exam endpoints."""

    def __init__(self, base_url, timeout=20, http=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = http or requests.Session()

    def _call(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            # Timeout is crucial to keep the countdown responsive
            resp = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Exam API unreachable ({method} {url}): {e}")
            raise ExamSessionError(NETWORK_ERROR_MESSAGE, code='network_error')

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not resp.ok:
            raise ExamSessionError(
                data.get('error', 'Beklenmeyen bir hata oluştu'),
                code=data.get('code'),
                status=resp.status_code,
            )
        return data

    def fetch_public_exam(self, exam_code, email=None):
        params = {'email': email} if email else None
        return self._call('GET', f"/api/exams/public/{exam_code}/", params=params)

    def submit(self, exam_id, student_info, answers):
        payload = {
            'examId': exam_id,
            'studentInfo': student_info,
            'answers': answers,
        }
        return self._call('POST', '/api/exams/submit/', json=payload)


class PublicExamSession:
    """
    info -> exam -> completed. There is no way back from completed.

    submit() runs at most once at a time, and the countdown fires it at most
    once in total, so a "finish" click racing the timer produces a single
    request.
    """

    def __init__(self, api, exam_code):
        self.api = api
        self.exam_code = exam_code
        self.state = SessionState.INFO
        self.exam = None
        self.error = ''
        self.result = None

        self.student_info = {'firstName': '', 'lastName': '', 'email': ''}
        self.answers = {}
        self.current_index = 0
        self.time_left = 0

        self._submit_lock = threading.Lock()
        self._submitting = False
        self._expired = False

    # --- loading & identity ---

    def load(self, email=None):
        self.error = ''
        try:
            self.exam = self.api.fetch_public_exam(self.exam_code, email=email)
        except ExamSessionError as e:
            self.error = e.message
            raise
        return self.exam

    def set_student_info(self, first_name, last_name, email):
        self.student_info = {
            'firstName': (first_name or '').strip(),
            'lastName': (last_name or '').strip(),
            'email': (email or '').strip(),
        }

    def start(self):
        if self.exam is None:
            raise ExamSessionError('Sınav henüz yüklenmedi', code='not_loaded')
        if self.state != SessionState.INFO:
            raise ExamSessionError('Sınav zaten başlatıldı', code='already_started')

        info = self.student_info
        if not info['firstName'] or not info['lastName'] or not info['email']:
            self.error = 'Lütfen tüm bilgileri doldurun'
            raise ExamSessionError(self.error, code='invalid')
        try:
            validate_email(info['email'])
        except ValidationError:
            self.error = 'Lütfen geçerli bir e-posta adresi girin'
            raise ExamSessionError(self.error, code='invalid')

        self.error = ''
        self.time_left = self.exam['duration'] * 60
        self.state = SessionState.EXAM

    # --- answering & navigation ---

    @property
    def questions(self):
        return self.exam['questions'] if self.exam else []

    @property
    def current_question(self):
        if not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def progress(self):
        if not self.questions:
            return 0
        return (self.current_index + 1) / len(self.questions) * 100

    def answer(self, question_id, value):
        if self.state != SessionState.EXAM:
            return
        self.answers[str(question_id)] = value

    def next_question(self):
        if self.current_index < len(self.questions) - 1:
            self.current_index += 1

    def previous_question(self):
        if self.current_index > 0:
            self.current_index -= 1

    def go_to(self, index):
        if 0 <= index < len(self.questions):
            self.current_index = index

    # --- countdown ---

    def format_time(self):
        mins, secs = divmod(max(self.time_left, 0), 60)
        return f"{mins}:{secs:02d}"

    def tick(self, seconds=1):
        """Advance the countdown; the first time it reaches zero, submit."""
        if self.state != SessionState.EXAM or self._expired:
            return
        self.time_left = max(self.time_left - seconds, 0)
        if self.time_left == 0:
            self._expired = True
            logger.info(f"Time is up for exam {self.exam_code}, submitting automatically")
            try:
                self.submit()
            except ExamSessionError:
                # Already on self.error for the candidate; they resubmit by hand
                pass

    def run_countdown(self, stop_event=None, interval=1.0):
        """Tick once per `interval` seconds until the session ends or `stop_event` is set."""
        stop_event = stop_event or threading.Event()
        while self.state == SessionState.EXAM and not self._expired:
            if stop_event.wait(interval):
                return
            self.tick()

    # --- submission ---

    def submit(self):
        """
        Send all answers. Returns the server result, or None when another
        submit is already in flight or the session is already completed.
        """
        with self._submit_lock:
            if self.state != SessionState.EXAM or self._submitting:
                return None
            self._submitting = True

        try:
            result = self.api.submit(self.exam['id'], dict(self.student_info), dict(self.answers))
        except ExamSessionError as e:
            self.error = e.message
            raise
        else:
            with self._submit_lock:
                self.result = result
                self.error = ''
                self.state = SessionState.COMPLETED
        finally:
            with self._submit_lock:
                self._submitting = False
        return result
