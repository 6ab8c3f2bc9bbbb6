# institute_platform/crm/models.py
from django.conf import settings
from django.db import models


class Course(models.Model):
    class Status(models.TextChoices):
        PLANNED = "PLANNED", "Planlandı"
        ACTIVE = "ACTIVE", "Devam Ediyor"
        COMPLETED = "COMPLETED", "Tamamlandı"
        CANCELLED = "CANCELLED", "İptal Edildi"

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PLANNED)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.code} - {self.name}"


class PersonQuerySet(models.QuerySet):
    def by_email(self, email):
        return self.filter(email=Person.normalize_email(email)).first()


class Person(models.Model):
    """A student or contact known to the CRM. Exam candidates are Persons."""
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    # Natural key shared by the CRM person list and the public exam flow
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='created_persons')
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PersonQuerySet.as_manager()

    def __str__(self):
        return f"{self.first_name} {self.last_name} <{self.email}>"

    @staticmethod
    def normalize_email(email):
        return (email or '').strip().lower()

    def save(self, *args, **kwargs):
        self.email = self.normalize_email(self.email)
        super().save(*args, **kwargs)


class RegistrationQuerySet(models.QuerySet):
    def active(self):
        return self.exclude(status=Registration.Status.CANCELLED)

    def for_candidate(self, person, course):
        return self.active().filter(person=person, course=course)


class Registration(models.Model):
    class Status(models.TextChoices):
        POTENTIAL = "POTENTIAL", "Potansiyel"
        CONFIRMED = "CONFIRMED", "Onaylandı"
        CANCELLED = "CANCELLED", "İptal Edildi"

    class PaymentStatus(models.TextChoices):
        PENDING = "PENDING", "Bekliyor"
        PARTIAL = "PARTIAL", "Kısmi"
        PAID = "PAID", "Ödendi"

    person = models.ForeignKey(Person, on_delete=models.CASCADE, related_name='registrations')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='registrations')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.POTENTIAL)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    registration_date = models.DateTimeField(auto_now_add=True)

    objects = RegistrationQuerySet.as_manager()

    def __str__(self):
        return f"{self.person} - {self.course} - {self.payment_status}"

    def save(self, *args, **kwargs):
        # Payment status always follows the amounts
        if self.paid_amount >= self.total_amount:
            self.payment_status = self.PaymentStatus.PAID
        elif self.paid_amount > 0:
            self.payment_status = self.PaymentStatus.PARTIAL
        else:
            self.payment_status = self.PaymentStatus.PENDING
        super().save(*args, **kwargs)
