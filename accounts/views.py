# accounts/views.py
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from competition.models import QuizAttempt
from competition.serializers import QuizAttemptSerializer

from .models import User
from .permissions import IsAdminOrInstructor
from .serializers import ProfileSerializer, RegisterSerializer, UserSerializer


class RegisterView(APIView):
    """
    POST /api/auth/register/
    Creates a STUDENT account and returns a token pair.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        ser = RegisterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = ser.save()

        refresh = RefreshToken.for_user(user)
        return Response(
            {
                "user": UserSerializer(user).data,
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            },
            status=status.HTTP_201_CREATED,
        )


class UsersViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET /api/users/?role=STUDENT|INSTRUCTOR|ADMIN   (admin/instructor)
    GET /api/users/me/                              (anyone, own profile)
    GET /api/users/{id}/history/?quiz_id=<uuid>
    """
    queryset = User.objects.all().order_by("username")
    serializer_class = UserSerializer
    filterset_fields = ["role"]

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [IsAdminOrInstructor()]
        return [permissions.IsAuthenticated()]

    @action(detail=False, methods=["get"])
    def me(self, request):
        user = User.objects.prefetch_related("badges").get(pk=request.user.pk)
        return Response(ProfileSerializer(user).data)

    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request, pk=None):
        """
        Admin/Instructor can view anyone; students only themselves.
        """
        if not (IsAdminOrInstructor().has_permission(request, self) or str(request.user.pk) == str(pk)):
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        user = get_object_or_404(User, pk=pk)
        qs = (
            QuizAttempt.objects
            .filter(student=user)
            .select_related("quiz")
            .prefetch_related("answers")
            .order_by("-started_at")
        )
        quiz_id = request.query_params.get("quiz_id")
        if quiz_id:
            qs = qs.filter(quiz_id=quiz_id)

        return Response({"user_id": user.pk, "items": QuizAttemptSerializer(qs, many=True).data})
