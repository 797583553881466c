import logging

from backend.app.core.exceptions import NotFoundError, OverpaymentError, StateConflictError, ValidationError
from backend.app.core.logging import configure_logging


def test_error_kinds_map_to_status_codes():
    assert ValidationError("bad").status_code == 400
    assert OverpaymentError("too much").status_code == 400
    assert OverpaymentError("too much").kind == "overpayment"
    assert isinstance(OverpaymentError("too much"), ValidationError)
    assert StateConflictError("nope").status_code == 409
    assert NotFoundError("Invoice", 7).status_code == 404


def test_not_found_detail_names_resource():
    assert NotFoundError("Invoice", 7).detail == "Invoice 7 not found"
    assert NotFoundError("Invoice").detail == "Invoice not found"


def test_configure_logging_installs_single_handler():
    configure_logging("DEBUG")
    configure_logging("WARNING")
    logger = logging.getLogger("backend")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
