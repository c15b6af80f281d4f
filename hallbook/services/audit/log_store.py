"""
Document store holding the append-only audit collections.

The client is owned by the application: `start()` at startup, `close()` at
shutdown. The connection itself is opened lazily on first use.
"""

import threading
from typing import Callable, Optional

from pymongo import MongoClient
from pymongo.collection import Collection

from hallbook.config.settings import Settings
from hallbook.core.exceptions import ConfigurationError
from hallbook.core.logging import get_logger

logger = get_logger(__name__)

ClientFactory = Callable[[str], MongoClient]


def _default_client_factory(uri: str) -> MongoClient:
    return MongoClient(uri, serverSelectionTimeoutMS=5000, connectTimeoutMS=5000)


class MongoLogStore:
    """Lazily connected MongoDB client for the log collections."""

    def __init__(
        self,
        uri: Optional[str],
        database: str,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.uri = uri
        self.database = database
        self._client_factory = client_factory or _default_client_factory
        self._client: Optional[MongoClient] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client_factory: Optional[ClientFactory] = None,
    ) -> "MongoLogStore":
        return cls(settings.MONGODB_URI, settings.MONGODB_DB, client_factory)

    def start(self) -> None:
        """
        Validate configuration.

        Raises:
            ConfigurationError: If MONGODB_URI is not set
        """
        if not self.uri:
            raise ConfigurationError("MONGODB_URI missing", setting="MONGODB_URI")
        logger.info(f"Audit log store configured (database={self.database})")

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if not self.uri:
                        raise ConfigurationError("MONGODB_URI missing", setting="MONGODB_URI")
                    self._client = self._client_factory(self.uri)
                    logger.debug("Audit log store connected")
        return self._client

    def collection(self, name: str) -> Collection:
        return self.client[self.database][name]

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
                logger.info("Audit log store closed")
