"""Bulk question import: CSV parsing, row validation and the blank template.

Rows are validated as a whole batch. Error messages carry spreadsheet row
numbers, so the first data row is reported as row 2 (row 1 is the header).
"""
import csv
import io

from django.conf import settings

from cores.exceptions import ImportValidationError
from .models import Question

REQUIRED_COLUMNS = ['questionText', 'questionType', 'correctAnswer', 'points']
OPTION_LABELS = ['A', 'B', 'C', 'D']
TEMPLATE_COLUMNS = REQUIRED_COLUMNS + [f'option{label}' for label in OPTION_LABELS]


def parse_questions_csv(text):
    """Turn a CSV payload into a list of row dicts keyed by the header names."""
    reader = csv.reader(io.StringIO(text.lstrip('\ufeff')))
    rows = [row for row in reader if any(cell.strip() for cell in row)]

    if len(rows) < 2:
        raise ImportValidationError(
            ['CSV dosyası en az bir başlık satırı ve bir veri satırı içermelidir']
        )

    headers = [h.strip() for h in rows[0]]
    missing = [col for col in REQUIRED_COLUMNS if col not in headers]
    if missing:
        raise ImportValidationError([f"Gerekli kolon eksik: {col}" for col in missing])

    parsed = []
    for values in rows[1:]:
        parsed.append({
            header: (values[idx].strip() if idx < len(values) else '')
            for idx, header in enumerate(headers)
            if header
        })
    return parsed


def _text(row, key):
    value = row.get(key)
    if value is None:
        return ''
    return str(value).strip()


def _positive_int(value):
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def validate_rows(rows):
    """
    Validate every row and build model-ready question data.
    Returns (questions, errors); `questions` is only meaningful when `errors` is empty.
    """
    questions = []
    errors = []
    valid_types = set(Question.QuestionType.values)

    for index, row in enumerate(rows):
        row_num = index + 2  # header is row 1
        row_errors = []

        question_text = _text(row, 'questionText')
        question_type = _text(row, 'questionType')
        correct_answer = _text(row, 'correctAnswer')
        points = _positive_int(row.get('points'))

        if not question_text:
            row_errors.append(f"Satır {row_num}: Soru metni gereklidir")

        if not question_type:
            row_errors.append(f"Satır {row_num}: Soru tipi gereklidir")
        elif question_type not in valid_types:
            row_errors.append(f"Satır {row_num}: Geçersiz soru tipi ({question_type})")

        if not correct_answer:
            row_errors.append(f"Satır {row_num}: Doğru cevap gereklidir")

        if points is None:
            row_errors.append(f"Satır {row_num}: Geçerli bir puan değeri gereklidir")

        options = None
        if question_type == Question.QuestionType.MULTIPLE_CHOICE:
            options = {
                label: _text(row, f'option{label}')
                for label in OPTION_LABELS
                if _text(row, f'option{label}')
            }
            if 'A' not in options or 'B' not in options:
                row_errors.append(
                    f"Satır {row_num}: Çoktan seçmeli sorular için en az A ve B şıkları gereklidir"
                )
            elif correct_answer and correct_answer not in options:
                row_errors.append(f"Satır {row_num}: Doğru cevap şıklardan biri olmalıdır")

        if (question_type == Question.QuestionType.TRUE_FALSE and correct_answer
                and correct_answer not in settings.TRUE_FALSE_CHOICES):
            choices = ' / '.join(settings.TRUE_FALSE_CHOICES)
            row_errors.append(f"Satır {row_num}: Doğru cevap {choices} olmalıdır")

        order = None
        if _text(row, 'order'):
            order = _positive_int(row.get('order'))
            if order is None:
                row_errors.append(f"Satır {row_num}: Geçersiz sıra numarası")

        if row_errors:
            errors.extend(row_errors)
            continue

        questions.append({
            'question_text': question_text,
            'question_type': question_type,
            'options': options,
            'correct_answer': correct_answer,
            'points': points,
            'order': order,
        })

    return questions, errors


def build_template():
    """The blank import template, in exactly the format parse_questions_csv reads."""
    true_label, false_label = settings.TRUE_FALSE_CHOICES
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(TEMPLATE_COLUMNS)
    writer.writerow([
        "Türkiye'nin başkenti neresidir?", 'MULTIPLE_CHOICE', 'A', 10,
        'Ankara', 'İstanbul', 'İzmir', 'Bursa',
    ])
    writer.writerow([
        "JavaScript'te değişken tanımlamak için hangi anahtar kelimeler kullanılır?", 'MULTIPLE_CHOICE', 'A', 10,
        'var, let, const', 'function', 'class', 'import',
    ])
    writer.writerow(["Node.js bir programlama dili midir?", 'TRUE_FALSE', false_label, 5, '', '', '', ''])
    writer.writerow(["TypeScript JavaScript'in üzerine tip güvenliği ekler.", 'TRUE_FALSE', true_label, 5, '', '', '', ''])
    writer.writerow([
        "React'te component state'ini güncellemek için hangi hook kullanılır?", 'SHORT_ANSWER', 'useState', 15,
        '', '', '', '',
    ])
    writer.writerow([
        "MVC (Model-View-Controller) mimarisini açıklayınız.", 'ESSAY', 'Manuel değerlendirme gerekir', 20,
        '', '', '', '',
    ])
    return buffer.getvalue()
