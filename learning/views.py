# learning/views.py
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsAdminOrInstructor, IsStaffOrReadOnly, IsStudent
from common.enums import EnrollmentStatus
from competition.services import enroll_student, remove_enrollment, set_enrollment_status

from .models import Course, Enrollment, Lesson
from .serializers import CourseSerializer, EnrollmentCreateSerializer, EnrollmentSerializer, LessonSerializer


class CourseViewSet(viewsets.ModelViewSet):
    """
    Admin/Instructor can create/update courses; others read-only.
    """
    queryset = Course.objects.select_related("instructor").all()
    serializer_class = CourseSerializer
    permission_classes = [IsStaffOrReadOnly]
    filterset_fields = ["status", "difficulty_level", "is_featured"]

    def perform_create(self, serializer):
        serializer.save(instructor=self.request.user)

    @action(detail=True, methods=["get"])
    def lessons(self, request, pk=None):
        course = self.get_object()
        return Response(LessonSerializer(course.lessons.all(), many=True).data)


class EnrollmentViewSet(viewsets.ModelViewSet):
    """
    Students self-enroll; Admin/Instructor can list/manage status.
    """
    queryset = Enrollment.objects.select_related("course").all()
    serializer_class = EnrollmentSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):
        if self.action in ["set_status"]:
            return [IsAdminOrInstructor()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        # Admin/Instructor see all; Student sees own
        qs = super().get_queryset()
        if IsAdminOrInstructor().has_permission(self.request, self):
            return qs
        return qs.filter(student=self.request.user)

    @action(detail=False, methods=["get"])
    def my(self, request):
        """
        Current user's enrollments.
        """
        qs = Enrollment.objects.select_related("course").filter(student=request.user)
        return Response(EnrollmentSerializer(qs, many=True).data)

    def create(self, request, *args, **kwargs):
        """
        Student self-enrolls in a course.
        """
        if not IsStudent().has_permission(request, self) and not IsAdmin().has_permission(request, self):
            raise PermissionDenied("Only students can self-enroll.")

        ser = EnrollmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        course = ser.validated_data["course"]
        obj, created = enroll_student(request.user.pk, course.pk)
        return Response(EnrollmentSerializer(obj).data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    def partial_update(self, request, *args, **kwargs):
        raise PermissionDenied("Use set-status to change an enrollment.")

    def perform_destroy(self, instance):
        remove_enrollment(instance.pk)

    @action(detail=True, methods=["patch"], url_path="set-status")
    def set_status(self, request, pk=None):
        """
        Admin/Instructor can set status = ACTIVE/COMPLETED/DROPPED.
        Only ACTIVE enrollees are ranked, so the course leaderboard is rebuilt.
        """
        enroll = self.get_object()
        status_val = request.data.get("status")
        if status_val not in EnrollmentStatus.values:
            return Response({"detail": f"Invalid status. Use one of {list(EnrollmentStatus.values)}"},
                            status=status.HTTP_400_BAD_REQUEST)
        enroll = set_enrollment_status(enroll.pk, status_val)
        return Response(EnrollmentSerializer(enroll).data)
