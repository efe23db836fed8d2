"""
Service Container
-----------------
Composition root. Every long-lived object (connection managers, stores,
codec, session manager) is constructed here once at process start and
reached by request handlers through `request.app.state.container`.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from trustgate.auth.revocation_store import RedisRevocationStore, RevocationStore
from trustgate.auth.session_manager import AuthSessionManager
from trustgate.auth.token_codec import TokenCodec
from trustgate.core.config_manager import ApplicationSettings
from trustgate.core.database_connection import DatabaseManager
from trustgate.core.redis_connection import RedisManager
from trustgate.psql_db_services.kyc_service import KYCService
from trustgate.psql_db_services.schema import ensure_schema
from trustgate.psql_db_services.users_service import UsersService
from trustgate.storage.media_storage import LocalMediaStorage, MediaStorage
from trustgate.utils.password_hashing import PasswordHasher


@dataclass
class ServiceContainer:
    settings: ApplicationSettings
    codec: TokenCodec
    revocations: RevocationStore
    users: UsersService
    session_manager: AuthSessionManager
    kyc: KYCService
    media: MediaStorage
    database_manager: Optional[DatabaseManager] = None
    redis_manager: Optional[RedisManager] = None

    @classmethod
    async def build(cls, settings: ApplicationSettings) -> "ServiceContainer":
        """
        Connect to PostgreSQL and Redis and wire the services together.

        Raises whatever the connection attempt raises: the process must not
        start serving without its stores.
        """
        database_manager = DatabaseManager(settings)
        await database_manager.initialize()
        if not await database_manager.ping():
            raise RuntimeError("PostgreSQL is not reachable")
        await ensure_schema(database_manager)
        logger.info("[SUCCESS] PostgreSQL connected and ready")

        redis_manager = RedisManager(settings)
        redis_manager.initialize()
        if not await redis_manager.ping():
            raise RuntimeError("Redis is not reachable")
        logger.info("[SUCCESS] Redis connected and ready")

        codec = TokenCodec.from_settings(settings)
        revocations = RedisRevocationStore(
            redis_manager.client, settings.revocation_retention_seconds
        )
        users = UsersService(database_manager)
        session_manager = AuthSessionManager(
            credentials=users,
            revocations=revocations,
            codec=codec,
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        )

        return cls(
            settings=settings,
            codec=codec,
            revocations=revocations,
            users=users,
            session_manager=session_manager,
            kyc=KYCService(database_manager),
            media=LocalMediaStorage(settings.media_root, settings.media_base_url),
            database_manager=database_manager,
            redis_manager=redis_manager,
        )

    async def close(self) -> None:
        if self.database_manager is not None:
            await self.database_manager.close()
        if self.redis_manager is not None:
            await self.redis_manager.close()
        logger.info("Service container closed")
