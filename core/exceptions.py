# core/exceptions.py
from rest_framework.response import Response
from rest_framework.views import exception_handler

from competition.exceptions import CompetitionError


def api_exception_handler(exc, context):
    """
    Render competition policy errors as {"detail", "code"} with their own status;
    everything else goes through DRF's default handler.
    """
    if isinstance(exc, CompetitionError):
        return Response({"detail": str(exc), "code": exc.code}, status=exc.status_code)
    return exception_handler(exc, context)
