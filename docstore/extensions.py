# docstore/extensions.py
from pathlib import Path

from flask_cors import CORS

from .dispatcher import Dispatcher
from .storage.documents import DocumentStore
from .storage.formats import provision_formats

# CORS is a real Flask extension (keeps init_app)
cors = CORS()

EXTENSION_KEY = "docstore.dispatcher"


def init_store(app) -> Dispatcher:
    """Create storage directories, provision formats and attach a Dispatcher to app."""
    storage_dir = Path(app.config["STORAGE_DIR"])
    storage_dir.mkdir(parents=True, exist_ok=True)
    for sub in app.config.get("STORAGE_SUBDIRS", ()):
        (storage_dir / sub).mkdir(parents=True, exist_ok=True)
    app.logger.info("Base storage directory exists: %s", storage_dir)

    registry = provision_formats(Path(app.config["FORMATS_DIR"]))
    app.logger.info(
        "Loaded data file formats from %s: %s", app.config["FORMATS_DIR"], ", ".join(registry.types())
    )

    dispatcher = Dispatcher(registry, DocumentStore(storage_dir), logger=app.logger)
    app.extensions[EXTENSION_KEY] = dispatcher
    return dispatcher
