from dataclasses import dataclass
from typing import Optional

from .logger import FlowLogger


@dataclass
class FlowConfiguration:
    """
    A flow tracking configuration.
    """

    local_ip: str
    """
    The IP address of the local side of the connection.

    The first packet of the trace which is accepted must be sent from this
    address to `remote_ip`.
    """

    remote_ip: str
    """
    The IP address of the remote side of the connection.
    """

    flow_logger: Optional[FlowLogger] = None
    """
    The :class:`~bdpflow.flow.logger.FlowLogger` instance to log events to.
    """
