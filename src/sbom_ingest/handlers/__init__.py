# sbom_ingest/handlers/__init__.py

import logging

# Common logger for all handlers
logger = logging.getLogger("sbom-ingest")

from .detect import handle_detect
from .parse import handle_parse
from .validate import handle_validate

__all__ = [
    'handle_detect',
    'handle_parse',
    'handle_validate',
]
