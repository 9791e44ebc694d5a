from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import F, Q

from common.enums import Role


class User(AbstractUser):
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT)
    email = models.EmailField(unique=True, null=True, blank=True)
    phone_number = models.CharField(max_length=20, blank=True)

    # platform-wide progression; course totals live on competition.LeaderboardEntry
    total_points   = models.PositiveIntegerField(default=0)
    current_streak = models.PositiveIntegerField(default=0)
    longest_streak = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(longest_streak__gte=F("current_streak")),
                name="user_longest_streak_gte_current",
            ),
        ]

    def save(self, *args, **kwargs):
        # blank emails are stored as NULL so the unique constraint ignores them
        if not self.email:
            self.email = None
        super().save(*args, **kwargs)

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    def __str__(self):
        return f"{self.username} • {self.role}"


class Badge(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="badges")
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    icon_url = models.URLField(blank=True)
    earned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-earned_at", "id")
        indexes = [models.Index(fields=["user", "earned_at"], name="badge_user_earned_idx")]

    def __str__(self):
        return f"{self.name} → {self.user}"
