from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from common.enums import Role

from .models import Badge, User


class BadgeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Badge
        fields = ["id", "name", "description", "icon_url", "earned_at"]


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id", "username", "email", "first_name", "last_name", "phone_number", "role",
            "total_points", "current_streak", "longest_streak",
        ]
        read_only_fields = ["role", "total_points", "current_streak", "longest_streak"]


class ProfileSerializer(UserSerializer):
    badges = BadgeSerializer(many=True, read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ["badges"]


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ["username", "email", "first_name", "last_name", "phone_number", "password"]

    def validate_email(self, value):
        if value and User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already in use.")
        return value or None

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(role=Role.STUDENT, **validated_data)
        user.set_password(password)
        user.save()
        return user
