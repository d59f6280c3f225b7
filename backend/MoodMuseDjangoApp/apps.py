# MoodMuseDjangoApp/apps.py
import os
import sys
import logging
from django.apps import AppConfig

log = logging.getLogger(__name__)

MGMT_CMDS_TO_SKIP = {
    "makemigrations",
    "migrate",
    "collectstatic",
    "shell",
    "check",
    "dbshell",
    "test",
    "showmigrations",
    "loaddata",
    "dumpdata",
}

def _is_management_command_invocation(argv: list[str]) -> bool:
    # manage.py <command> [args...]
    if len(argv) >= 2 and argv[0].endswith("manage.py"):
        return argv[1] in MGMT_CMDS_TO_SKIP
    return False

class MoodmusedjangoappConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'MoodMuseDjangoApp'

    def ready(self):
        if os.getenv("MOODMUSE_EAGER_INIT", "true").lower() in {"0", "false", "no"}:
            log.info("Skipping provider eager init: MOODMUSE_EAGER_INIT disabled")
            return

        if _is_management_command_invocation(sys.argv):
            log.info("Skipping provider eager init during management command: %s", sys.argv[1:])
            return

        # Build provider clients once so missing credentials are reported at startup.
        # Missing credentials degrade features; they never stop the process.
        from .moodboard.services import get_orchestrator
        orchestrator = get_orchestrator()
        log.info(
            "Providers configured: completion=%s images=%s catalog=%s",
            orchestrator.completion.is_configured(),
            orchestrator.images.is_configured(),
            orchestrator.catalog.is_configured(),
        )
