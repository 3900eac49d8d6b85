from django.apps import AppConfig
import logging

logger = logging.getLogger(__name__)


class ShopConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "shop"

    def ready(self):
        """
        Apply pending migrations at boot when SHOP_AUTO_MIGRATE is set.
        A database that is not reachable yet is logged and boot carries on.
        """
        from django.conf import settings

        if not settings.SHOP_AUTO_MIGRATE:
            return

        from django.core.management import call_command
        from django.db.utils import OperationalError, ProgrammingError

        try:
            call_command("migrate", interactive=False)
            logger.info("Shop schema is up to date.")
        except (OperationalError, ProgrammingError) as e:
            logger.error("Skipping boot migrations, database unavailable: %s", e)
        except Exception:
            logger.exception("Boot migrations for the shop app failed.")
