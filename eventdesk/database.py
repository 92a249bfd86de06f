import logging

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from eventdesk.config import settings
from eventdesk.models import User, Event, FormSubmission, ActivityLog

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [User, Event, FormSubmission, ActivityLog]

async def init_db():
    client = AsyncIOMotorClient(settings.MONGO_URI)
    await init_beanie(database=client[settings.DB_NAME], document_models=DOCUMENT_MODELS)
    await ensure_default_admin()

async def ensure_default_admin():
    """Create the bootstrap super-admin when the users collection is empty."""
    if await User.count() > 0:
        return None

    logger.info("[DB Init] Creating default super-admin %s", settings.ADMIN_EMAIL)
    from eventdesk.utils.auth import Hash
    admin = User(
        first_name="Super",
        last_name="Admin",
        email=settings.ADMIN_EMAIL.lower(),
        password=Hash.make(settings.ADMIN_PASS),
        role="super-admin",
    )
    await admin.insert()
    return admin
