from typing import Optional

from .packet import PacketRecord


class FlowError(Exception):
    """
    Base class for packets rejected by the flow tracker.

    Rejections are per-packet: the tracker state is left untouched.
    """

    reason = "rejected"

    def __init__(self, message: str, record: Optional[PacketRecord] = None) -> None:
        super().__init__(message)
        self.record = record


class NotInFlowError(FlowError):
    """
    The packet is not exchanged between the local and remote addresses.
    """

    reason = "not_in_flow"


class NotLocalToRemoteError(FlowError):
    """
    The first packet of the flow was not sent by the local address.
    """

    reason = "not_local_to_remote"


class UnknownDirectionError(FlowError):
    """
    The packet addresses do not match the learned endpoints.
    """

    reason = "unknown_direction"


class OutOfOrderSendError(FlowError):
    """
    A sent segment does not extend past the last inflight segment.
    """

    reason = "out_of_order_send"


class ZeroIntervalRateError(FlowError):
    """
    The delivery interval of an acknowledged segment is zero.
    """

    reason = "zero_interval_rate"


class CaptureOrderError(FlowError):
    """
    An acknowledgment was captured before the segment it acknowledges.
    """

    reason = "capture_order"


class FlowStateError(RuntimeError):
    """
    The tracker reached a state which its callers must never produce.
    """
