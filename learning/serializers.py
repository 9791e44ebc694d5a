# learning/serializers.py
from rest_framework import serializers

from .models import Course, Enrollment, Lesson


class CourseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = [
            "id", "instructor", "title", "code", "description", "status",
            "difficulty_level", "is_featured", "created_at", "updated_at",
        ]
        read_only_fields = ["instructor", "created_at", "updated_at"]


class LessonSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lesson
        fields = ["id", "course", "title", "description", "sequence_order", "is_published"]


class EnrollmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Enrollment
        fields = ["id", "student", "course", "status", "progress_percentage", "enrolled_at"]
        read_only_fields = ["student", "enrolled_at"]


class EnrollmentCreateSerializer(serializers.Serializer):
    course = serializers.PrimaryKeyRelatedField(queryset=Course.objects.all())
