import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager.

    Created once at startup and stored on ``app.state``; repositories receive
    ``db`` explicitly instead of reaching for a global.
    """

    def __init__(self, url: str = None, name: str = "mealbook", client=None):
        self.url = url
        self.name = name
        self.client = client
        self._owns_client = client is None
        self.db: AsyncIOMotorDatabase = None

    async def connect(self):
        """Connect to MongoDB and make sure indexes exist."""
        if self.client is None:
            self.client = AsyncIOMotorClient(self.url)
        self.db = self.client[self.name]

        await create_indexes(self.db)
        logger.info("Connected to MongoDB: %s", self.name)

    async def close(self):
        """Disconnect from MongoDB."""
        # An injected client belongs to the caller
        if self.client is not None and self._owns_client:
            self.client.close()
        logger.info("Disconnected from MongoDB")


async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    # One closing per hostel-month
    await db["monthly_closings"].create_index(
        [("hostel_id", 1), ("month", 1), ("year", 1)],
        unique=True
    )

    # One meal entry per boarder-day
    await db["meals"].create_index(
        [("hostel_id", 1), ("boarder_id", 1), ("date", 1)],
        unique=True
    )
    await db["meals"].create_index([("hostel_id", 1), ("date", 1)])

    # Expense and payment range scans
    await db["expenses"].create_index([("hostel_id", 1), ("date", 1), ("is_deleted", 1)])
    await db["payments"].create_index([("hostel_id", 1), ("boarder_id", 1), ("date", 1)])

    # Boarder listing per hostel
    await db["boarders"].create_index([("hostel_id", 1), ("is_deleted", 1), ("status", 1)])
