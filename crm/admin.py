from django.contrib import admin

from .models import Course, Person, Registration

admin.site.register(Course)
admin.site.register(Person)
admin.site.register(Registration)
