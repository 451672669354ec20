import logging

from property_panel.models.panel import PanelOptions
from property_panel.models.property import AddressQuery
from property_panel.models.result import SourceResult
from property_panel.services.panel_service import PanelContext, ResolvedLocation
from property_panel.utils.logging import bind_logger, get_logger, new_request_id


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


def test_child_loggers_share_the_package_namespace():
    logger = get_logger("services.panel")
    assert logger.name == "property_panel.services.panel"
    assert get_logger().name == "property_panel"


def test_bound_context_prefixes_messages():
    adapter = bind_logger(get_logger("tests"), request="abc123", stage="geocode")
    msg, kwargs = adapter.process("panel_start state=TX", {})
    assert msg == "request=abc123 stage=geocode panel_start state=TX"
    assert kwargs == {}
    bare, _ = bind_logger(get_logger("tests")).process("hello", {})
    assert bare == "hello"


def test_request_ids_are_short_and_distinct():
    first, second = new_request_id(), new_request_id()
    assert len(first) == 8
    assert first != second


def test_panel_warnings_are_logged_with_request_id():
    query = AddressQuery(full_address="1 Main St, Austin, TX")
    handler = ListHandler()
    logger = get_logger("services.panel")
    logger.addHandler(handler)
    try:
        ctx = PanelContext(query=query, options=PanelOptions(), location=ResolvedLocation.from_query(query))
        ctx.log = bind_logger(logger, request="req1")
        assert ctx.collect(SourceResult(value=None, warning="Geocoding: no match.")) is None
        ctx.warn("Census enrichment skipped: no ZIP from geocoding.")
    finally:
        logger.removeHandler(handler)

    assert ctx.warnings == ["Geocoding: no match.", "Census enrichment skipped: no ZIP from geocoding."]
    assert handler.messages[0] == "request=req1 panel_warning message='Geocoding: no match.'"
    assert len(handler.messages) == 2
