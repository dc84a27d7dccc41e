"""
Main entry point for the Registrar service.
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .api.rest_api import RegistrarRestAPI
from .core.enums import StorageBackend
from .core.exceptions import ConfigurationError
from .persistence import StoreFactory

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "backend": StorageBackend.FILE.value,
    "data_dir": "./data",
    "mongodb_uri": "mongodb://localhost:27017",
    "mongodb_db": "registrar",
    "host": "0.0.0.0",
    "port": 3000,
    "log_level": "INFO",
}

ENVIRONMENT_VARIABLES = {
    "backend": "REGISTRAR_BACKEND",
    "data_dir": "REGISTRAR_DATA_DIR",
    "mongodb_uri": "MONGODB_URI",
    "mongodb_db": "REGISTRAR_MONGODB_DB",
    "log_level": "REGISTRAR_LOG_LEVEL",
}


def load_config(config_path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None,
                environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Resolve configuration: defaults < JSON file < environment < explicit overrides."""
    config = dict(DEFAULT_CONFIG)

    if config_path:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {config_path}: {str(e)}")
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration file {config_path} must contain a JSON object")
        config.update(file_config)

    environ = os.environ if environ is None else environ
    for key, variable in ENVIRONMENT_VARIABLES.items():
        if environ.get(variable):
            config[key] = environ[variable]

    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value

    try:
        config["port"] = int(config["port"])
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid port: {config['port']}")

    return config


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


class RegistrarPlatform:
    """Wires the configured record store into the REST API and serves it."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._config = dict(DEFAULT_CONFIG)
        self._config.update(config or {})
        self._store = None
        self._rest_api = None

        self._initialize_platform()

    def _store_options(self) -> Dict[str, Any]:
        backend = str(self._config["backend"]).lower()
        if backend == StorageBackend.FILE.value:
            return {"base_path": self._config["data_dir"]}
        if backend == StorageBackend.MONGO.value:
            return {"uri": self._config["mongodb_uri"], "database_name": self._config["mongodb_db"]}
        raise ConfigurationError(f"Unsupported storage backend: {self._config['backend']}")

    def _initialize_platform(self):
        """Initialize the record store and the REST API."""
        backend = self._config["backend"]
        self._store = StoreFactory.create_store(backend, **self._store_options())
        logger.info("Record store initialized: %s", backend)

        self._rest_api = RegistrarRestAPI(self._store)
        logger.info("REST API initialized")

    @property
    def config(self) -> Dict[str, Any]:
        return dict(self._config)

    @property
    def store(self):
        return self._store

    @property
    def app(self):
        return self._rest_api.app

    def start_rest_server(self, host: Optional[str] = None, port: Optional[int] = None):
        """Serve the REST API until interrupted."""
        import uvicorn

        host = host or self._config["host"]
        port = port or self._config["port"]
        logger.info("Server running on http://%s:%s (docs at /docs)", host, port)
        uvicorn.run(
            self.app,
            host=host,
            port=port,
            log_level=str(self._config["log_level"]).lower()
        )

    def stop_platform(self):
        """Release the record store."""
        if self._store is not None:
            self._store.close()
            logger.info("Record store closed")


def create_app():
    """Application factory for ``uvicorn registrar.main:create_app --factory``."""
    load_dotenv()
    config = load_config(os.environ.get("REGISTRAR_CONFIG"))
    configure_logging(config["log_level"])
    return RegistrarPlatform(config).app


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Registrar academic records API")
    parser.add_argument("--config", type=str, help="Configuration file path (JSON)")
    parser.add_argument("--backend", choices=[b.value for b in StorageBackend], help="Storage backend")
    parser.add_argument("--data-dir", type=str, help="Directory holding the JSON files (file backend)")
    parser.add_argument("--mongodb-uri", type=str, help="MongoDB connection URI (mongo backend)")
    parser.add_argument("--mongodb-db", type=str, help="MongoDB database name (mongo backend)")
    parser.add_argument("--host", type=str, help="Bind address")
    parser.add_argument("--port", type=int, help="REST server port")
    parser.add_argument("--log-level", type=str, help="Logging level")

    args = parser.parse_args(argv)

    load_dotenv()
    try:
        config = load_config(args.config, overrides={
            "backend": args.backend,
            "data_dir": args.data_dir,
            "mongodb_uri": args.mongodb_uri,
            "mongodb_db": args.mongodb_db,
            "host": args.host,
            "port": args.port,
            "log_level": args.log_level,
        })
    except ConfigurationError as e:
        parser.error(e.message)

    configure_logging(config["log_level"])
    platform = RegistrarPlatform(config)

    try:
        platform.start_rest_server()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        platform.stop_platform()


if __name__ == "__main__":
    main()
