from django.contrib import admin

from .models import Course, Enrollment, Lesson


class EnrollmentInline(admin.TabularInline):
    model = Enrollment
    extra = 0
    raw_id_fields = ("student",)
    fields = ("student", "status", "progress_percentage", "enrolled_at")
    readonly_fields = ("enrolled_at",)


class LessonInline(admin.TabularInline):
    model = Lesson
    extra = 0
    show_change_link = True
    fields = ("sequence_order", "title", "is_published")
    ordering = ("sequence_order",)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("title", "code", "instructor", "status", "difficulty_level", "is_featured", "created_at")
    list_filter = ("status", "difficulty_level", "is_featured")
    search_fields = ("title", "code", "instructor__username")
    raw_id_fields = ("instructor",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [LessonInline, EnrollmentInline]


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "sequence_order", "is_published")
    list_filter = ("is_published", "course")
    search_fields = ("title", "course__title", "course__code")
    raw_id_fields = ("course",)


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("student", "course", "status", "progress_percentage", "enrolled_at")
    list_filter = ("status", "course")
    search_fields = ("student__username", "course__title", "course__code")
    raw_id_fields = ("student", "course")
    readonly_fields = ("enrolled_at",)
