from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .common.logging_setup import configure_logging
from .container import Container, build_container
from .employees.controller import register as register_employees
from .overtime.controller import register as register_overtime
from .reports.controller import register as register_reports
from .settings.controller import register as register_settings
from .tripleot.controller import register as register_tripleot
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None, *, start_runtime: bool = True) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")),
        log_file=getattr(settings, "LOG_FILE", None),
    )
    logger.info("Starting with settings=%s api=%s", settings_module, getattr(settings, "API_BASE_URL", "?"))

    container = container or build_container(settings=settings)
    app.extensions["ot_dashboard"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_overtime(app, container)
    register_reports(app, container)
    register_employees(app, container)
    register_tripleot(app, container)
    register_settings(app, container)

    # arm timers for a session persisted by an earlier run, then start polling
    container.auth_service.restore()
    container.runtime.submit(container.session_manager.sync)
    container.runtime.submit(container.polling.start)
    if start_runtime:
        container.runtime.start()
        if container.file_watcher is not None:
            container.file_watcher.start()

    return app
