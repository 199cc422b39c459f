"""
Sync app_metadata Script
Copies every profiles.role into the matching Supabase user's app_metadata.role.
Run once after a migration, or as a nightly job to repair drift.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.database.supabase_client import get_supabase_admin
from app.modules.user_admin.service import UserAdminService
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run the bulk sync; returns the process exit code"""
    try:
        service = UserAdminService(get_supabase_admin())
    except Exception as e:
        logger.error(f"Cannot create admin client: {e}")
        return 1

    logger.info("Starting app_metadata sync...")
    result = service.sync_all_users_app_metadata()

    if not result.success:
        logger.error(f"{result.message}: {result.error}")
        return 1

    logger.info(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
