"""
Application entry point — wires adapters and bootstraps a CA hierarchy.

Composition root: creates the concrete stores, builds the root and
intermediate CA documents from settings, and runs the bootstrap inside a
logging execution context.

This is the ONLY place where concrete adapters are instantiated.

Responsibilities:
  1. Load and validate configuration from environment
  2. Configure structlog for structured logging
  3. Create the document store and config store under settings.data_dir
  4. Generate root CA → intermediate CA, persist both, register the org
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime

import structlog

from pki_io import __version__
from pki_io.adapters.config_store import ConfigStore
from pki_io.adapters.document_store import FileDocumentStore
from pki_io.config import AppSettings, CASettings
from pki_io.domain.ports import DocumentStore
from pki_io.execution import LoggingExecutionContext
from pki_io.failure import ErrorCode
from pki_io.result import Result
from pki_io.x509.ca import CA, new_ca

CONFIG_FILE = "config.json"
DOCUMENTS_DIR = "documents"


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured, human-readable console logging.

    Unknown level names fall back to INFO.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _generate(
    ca_settings: CASettings,
    parent: CA | None,
    now: datetime,
    key_size: int,
) -> Result[CA]:
    not_before, not_after = ca_settings.validity(now)
    return new_ca(ca_settings.document()).flat_map(
        lambda ca: ca.generate_sub(parent, not_before, not_after, key_size=key_size)
    )


def bootstrap_hierarchy(
    settings: AppSettings,
    store: DocumentStore,
    config_store: ConfigStore,
    now: datetime | None = None,
) -> Result[tuple[CA, CA]]:
    """
    Generate a self-signed root CA and an intermediate CA signed by it.

    Both documents are saved to the store under their CA names and the org
    is registered in the config store with the root CA's id. The first
    failing step stops the bootstrap; nothing after it is written.
    """
    start = (now or datetime.now(UTC)).replace(microsecond=0)

    def _persist(root: CA, intermediate: CA) -> Result[tuple[CA, CA]]:
        return (
            store.save(root.name, root)
            .flat_map(lambda _: store.save(intermediate.name, intermediate))
            .flat_map(lambda _: config_store.save_org(settings.org_name, root.id))
            .map(lambda _: (root, intermediate))
        )

    return _generate(settings.root, None, start, settings.key_size).flat_map(
        lambda root: _generate(settings.intermediate, root, start, settings.key_size).flat_map(
            lambda intermediate: _persist(root, intermediate)
        )
    )


def main() -> None:
    """Load settings and bootstrap the CA hierarchy under settings.data_dir."""
    loaded_settings = Result.from_computation(AppSettings, ErrorCode.CONFIGURATION_ERROR, "Invalid settings")
    if loaded_settings.is_failure():
        error = loaded_settings.error()
        print(f"FATAL: {error.code.value}: {error.message}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    settings = loaded_settings.value()

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        log_level=settings.log_level,
        data_dir=str(settings.data_dir),
        key_size=settings.key_size,
    )

    store = FileDocumentStore(settings.data_dir / DOCUMENTS_DIR)
    config_store = ConfigStore(settings.data_dir / CONFIG_FILE)

    loaded = config_store.load()
    if loaded.is_failure() and loaded.error().code is not ErrorCode.NOT_FOUND:
        log.error("app.fatal_error", code=loaded.error().code.value, error=loaded.error().message)
        sys.exit(1)

    result = LoggingExecutionContext(operation="bootstrap").execute(
        lambda: bootstrap_hierarchy(settings, store, config_store)
    )

    if result.is_failure():
        log.error("app.fatal_error", code=result.error().code.value, error=result.error().message)
        sys.exit(1)

    root, intermediate = result.value()
    log.info("app.bootstrapped", root=root.id, intermediate=intermediate.id, org=settings.org_name)


if __name__ == "__main__":
    main()
