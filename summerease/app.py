"""
SummerEase - Service Container
==============================

Wires configuration, logging, storage, synthesis and session handling.

The identity provider and the checkout widget are hosted services and are
injected by the embedding application.

Usage:
    container = ServiceContainer(identity, widget)
    await container.initialize(AppConfig.from_env())

    context = await container.sessions.start()
    result = await container.pipeline.submit(context, RawInput.from_text(notes))

    await container.shutdown()
"""

import logging
from typing import Dict, Optional

from summerease.auth.identity import IdentityProvider
from summerease.billing.checkout import CheckoutWidget, UpgradeService
from summerease.config import AppConfig
from summerease.core.logging_config import configure_logging
from summerease.database import DatabaseConnection, Repositories, ensure_schema
from summerease.ingest.extractor import DocumentExtractor
from summerease.ingest.pipeline import IngestionPipeline, ProgressCallback
from summerease.library.assembler import RecordAssembler
from summerease.session import SessionManager
from summerease.shared.exceptions import ConfigurationError
from summerease.synthesis.client import ModelBackend, SynthesisClient

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for all services.

    Manages initialization and lifecycle of:
    - Database connection and repositories
    - Extraction, synthesis and the ingestion pipeline
    - Session manager and upgrade service
    """

    def __init__(
        self,
        identity: IdentityProvider,
        widget: Optional[CheckoutWidget] = None,
        backend: Optional[ModelBackend] = None,
        on_progress: Optional[ProgressCallback] = None
    ):
        self.identity = identity
        self.widget = widget
        self.backend = backend
        self.on_progress = on_progress

        self.config: Optional[AppConfig] = None
        self._database: Optional[DatabaseConnection] = None
        self._repositories: Optional[Repositories] = None
        self._pipeline: Optional[IngestionPipeline] = None
        self._sessions: Optional[SessionManager] = None
        self._upgrades: Optional[UpgradeService] = None
        self._initialized = False

    async def initialize(
        self,
        config: Optional[AppConfig] = None,
        database: Optional[DatabaseConnection] = None,
        create_schema: bool = True
    ) -> None:
        """Initialize all services."""
        if self._initialized:
            return

        config = config or AppConfig.from_env()
        self.config = config
        configure_logging(log_level=config.log_level)
        logger.info("Initializing services...")

        # 1. Database
        if database is None:
            if not config.database.enabled:
                raise ConfigurationError("DATABASE_URL is not set")
            database = DatabaseConnection.from_config(config.database)
        try:
            await database.connect()
            if create_schema:
                await ensure_schema(database)
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise
        self._database = database
        self._repositories = Repositories(database)
        logger.info("Database connected")

        # 2. Ingestion
        if self.backend is not None:
            client = SynthesisClient(self.backend, config.synthesis)
        else:
            client = SynthesisClient.from_config(config.synthesis)
        self._pipeline = IngestionPipeline(
            DocumentExtractor(config.ingest),
            client,
            RecordAssembler(self._repositories.summaries, config.ingest),
            config.ingest,
            on_progress=self.on_progress,
        )
        logger.info(f"Ingestion pipeline ready (model={config.synthesis.model})")

        # 3. Sessions
        self._sessions = SessionManager(
            self.identity,
            self._repositories.summaries,
            profiles=self._repositories.profiles,
        )

        # 4. Billing
        if self.widget is not None:
            self._upgrades = UpgradeService(
                self.widget,
                self._repositories.profiles,
                self._repositories.transactions,
                config.billing,
            )
        else:
            logger.warning("No checkout widget - upgrades disabled")

        self._initialized = True
        logger.info("All services initialized")

    async def shutdown(self) -> None:
        """Shutdown all services."""
        logger.info("Shutting down services...")

        if self._sessions is not None:
            self._sessions.stop()
        if self._database is not None:
            await self._database.close()

        self._initialized = False
        logger.info("Services shut down")

    def _require(self, service, name: str):
        if service is None:
            raise ConfigurationError(f"{name} is not initialized")
        return service

    @property
    def database(self) -> DatabaseConnection:
        return self._require(self._database, "database")

    @property
    def repositories(self) -> Repositories:
        return self._require(self._repositories, "repositories")

    @property
    def pipeline(self) -> IngestionPipeline:
        return self._require(self._pipeline, "pipeline")

    @property
    def sessions(self) -> SessionManager:
        return self._require(self._sessions, "sessions")

    @property
    def upgrades(self) -> UpgradeService:
        return self._require(self._upgrades, "upgrade service")

    @property
    def is_healthy(self) -> bool:
        return self._initialized and self._database is not None

    async def health_check(self) -> Dict[str, str]:
        """
        Component health.

        Checks:
        - Database connectivity
        - Synthesis circuit breaker state
        """
        components = {"status": "healthy"}

        if self._database is None:
            components["database"] = "not initialized"
            components["status"] = "unhealthy"
        elif await self._database.health_check():
            components["database"] = "healthy"
        else:
            components["database"] = "unhealthy"
            components["status"] = "unhealthy"

        if self._pipeline is not None:
            breaker = self._pipeline.synthesis_client.breaker
            components["synthesis"] = breaker.state.value
            if not breaker.is_closed and components["status"] == "healthy":
                components["status"] = "degraded"

        return components
