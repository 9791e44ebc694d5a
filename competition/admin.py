from django.contrib import admin

from .models import AttemptAnswer, LeaderboardEntry, Quiz, QuizAttempt, QuizQuestion


# ----- Inlines -----
class QuizQuestionInline(admin.TabularInline):
    model = QuizQuestion
    extra = 0
    fields = ("order", "text", "option_a", "option_b", "option_c", "option_d", "correct_answer", "points")
    ordering = ("order",)


class AttemptAnswerInline(admin.TabularInline):
    model = AttemptAnswer
    extra = 0
    can_delete = False
    raw_id_fields = ("question",)
    fields = ("question", "selected_option", "is_correct", "points_awarded")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


# ----- ModelAdmins -----
@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = (
        "title", "lesson", "time_limit_minutes", "passing_score",
        "max_attempts", "is_published", "created_at",
    )
    list_filter = ("is_published", "lesson__course")
    search_fields = ("title", "lesson__title", "lesson__course__code")
    raw_id_fields = ("lesson",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [QuizQuestionInline]


@admin.register(QuizQuestion)
class QuizQuestionAdmin(admin.ModelAdmin):
    list_display = ("short_text", "quiz", "order", "correct_answer", "points")
    list_filter = ("quiz",)
    search_fields = ("text",)
    ordering = ("quiz", "order")

    def short_text(self, obj):
        return (obj.text or "")[:80]


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    """Attempts change state only through the attempt services, so the admin is read-only."""
    list_display = (
        "id", "student", "quiz", "status", "score", "points_earned", "passed",
        "started_at", "completed_at",
    )
    list_filter = ("status", "passed", "quiz")
    search_fields = ("student__username", "student__email", "quiz__title")
    raw_id_fields = ("student", "quiz")
    readonly_fields = (
        "quiz", "student", "status", "score", "points_earned", "passed",
        "time_taken_seconds", "started_at", "completed_at", "created_at", "updated_at",
    )
    inlines = [AttemptAnswerInline]

    def has_add_permission(self, request):
        return False


@admin.register(LeaderboardEntry)
class LeaderboardEntryAdmin(admin.ModelAdmin):
    list_display = ("course", "rank_position", "student", "total_points", "avg_quiz_score", "last_qualified_at", "updated_at")
    list_filter = ("course",)
    search_fields = ("student__username", "course__code")
    ordering = ("course", "rank_position")
    readonly_fields = ("course", "student", "total_points", "rank_position", "avg_quiz_score",
                       "last_qualified_at", "updated_at")

    def has_add_permission(self, request):
        return False
