"""
Stream address resolver.

Turns a channel URL template into a request-ready address. The upstream
servers parse the substituted values strictly, so the formats below are
exact:

    {serverip}   configured server endpoint, verbatim
    {timestamp}  UTC time as yyyyMMddTHHmmss.00Z, e.g. 20260124T023012.00Z
    {starttime}  whole seconds since the epoch, e.g. 1769217012

Every time placeholder in one template is filled from a single clock read.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from tvgate.models.channel import (
    SERVER_IP_PLACEHOLDER,
    STARTTIME_PLACEHOLDER,
    TIMESTAMP_PLACEHOLDER,
)

logger = logging.getLogger(__name__)


def format_timestamp(now_millis: int) -> str:
    """Format milliseconds since the epoch as ``yyyyMMdd'T'HHmmss.00Z`` in UTC."""
    moment = datetime.fromtimestamp(now_millis // 1000, tz=timezone.utc)
    return moment.strftime("%Y%m%dT%H%M%S") + ".00Z"


def format_starttime(now_millis: int) -> str:
    return str(now_millis // 1000)


def resolve_template(template: str, server_endpoint: str, now_millis: int) -> str:
    """
    Substitute the known placeholders of ``template``.

    Pure: the same template, endpoint and time always give the same result.
    Unknown placeholders are left as they are.
    """
    result = template
    if SERVER_IP_PLACEHOLDER in result:
        result = result.replace(SERVER_IP_PLACEHOLDER, server_endpoint)
    if TIMESTAMP_PLACEHOLDER in result:
        result = result.replace(TIMESTAMP_PLACEHOLDER, format_timestamp(now_millis))
    if STARTTIME_PLACEHOLDER in result:
        result = result.replace(STARTTIME_PLACEHOLDER, format_starttime(now_millis))
    return result


class AddressResolver:
    """
    Resolves channel templates against the live clock and server endpoint.

    Usage:
        resolver = AddressResolver(engine.current_time_millis, settings.get_server_ip)
        url = resolver.resolve(channel.url_template)
    """

    def __init__(
        self,
        clock: Callable[[], int],
        server_endpoint: Callable[[], str],
    ):
        self._clock = clock
        self._server_endpoint = server_endpoint

    def resolve(self, template: str) -> str:
        needs_time = TIMESTAMP_PLACEHOLDER in template or STARTTIME_PLACEHOLDER in template
        needs_server = SERVER_IP_PLACEHOLDER in template
        if not (needs_time or needs_server):
            logger.debug("Template has no placeholders, using it as is")
            return template

        now_millis = self._clock() if needs_time else 0
        endpoint = self._server_endpoint() if needs_server else ""
        return resolve_template(template, endpoint, now_millis)
