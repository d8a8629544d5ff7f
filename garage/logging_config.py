"""
Journalisation / Logging setup.
Texte lisible en developpement, JSON une ligne par evenement en production.
"""

import json
import logging


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            log_entry["request_id"] = request_id
        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(debug: bool) -> None:
    """Installer le handler racine une seule fois / Install the root handler once."""
    handler = logging.StreamHandler()
    if debug:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        level = logging.DEBUG
    else:
        handler.setFormatter(JSONFormatter())
        level = logging.INFO
    logging.root.handlers = [handler]
    logging.root.setLevel(level)
    # Le moteur SQL logge deja via echo=DEBUG / The SQL engine already logs via echo
    logging.getLogger("sqlalchemy.engine").propagate = not debug
