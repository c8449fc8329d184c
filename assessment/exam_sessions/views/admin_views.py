import logging

from ...users.permissions import CanManageSessions
from ..serializers import CloseSessionsSerializer
from .base import EngineAPIView, success

__all__ = ["CloseSessionsView"]

logger = logging.getLogger(__name__)


class CloseSessionsView(EngineAPIView):
    """Close open sessions past their deadline, or every open session with ``close_all``."""

    permission_classes = [CanManageSessions]

    def post(self, request):
        serializer = CloseSessionsSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid(serializer)

        options = serializer.validated_data
        session_ids = self.engine.lifecycle.close_expired(
            close_all=options["close_all"], dry_run=options["dry_run"]
        )
        logger.info(
            f"User {request.user.username} closed {len(session_ids)} sessions "
            f"(close_all={options['close_all']}, dry_run={options['dry_run']})"
        )
        return success(
            "Sessions closed" if not options["dry_run"] else "Sessions due for closing",
            {"count": len(session_ids), "session_ids": session_ids},
        )
