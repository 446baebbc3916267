import logging

from quotedesk.app.core.logging import configure_logging


def test_configure_logging_quiets_sql_echo():
    configure_logging("debug")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
