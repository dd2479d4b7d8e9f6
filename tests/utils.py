from bdpflow.flow.packet import PacketRecord

CLIENT_IP = "10.0.0.1"
SERVER_IP = "10.0.0.2"
OTHER_IP = "10.0.0.3"

CLIENT_ISN = 1000
SERVER_ISN = 5000


def client_packet(
    timestamp: int,
    seq: int = 0,
    ack: int = 0,
    *,
    payload_size: int = 0,
    is_ack: bool = True,
    is_syn: bool = False,
    window_size: int = 64240,
) -> PacketRecord:
    """
    Build a client-to-server packet, `seq` and `ack` relative to the initial
    sequence numbers.
    """
    return PacketRecord(
        timestamp=timestamp,
        source_ip=CLIENT_IP,
        destination_ip=SERVER_IP,
        seq_num=(CLIENT_ISN + seq) % 2**32,
        ack_num=(SERVER_ISN + ack) % 2**32,
        is_syn=is_syn,
        is_ack=is_ack,
        window_size=window_size,
        payload_size=payload_size,
    )


def server_packet(
    timestamp: int,
    seq: int = 0,
    ack: int = 0,
    *,
    payload_size: int = 0,
    is_ack: bool = True,
    is_syn: bool = False,
    window_size: int = 65160,
) -> PacketRecord:
    """
    Build a server-to-client packet, `seq` and `ack` relative to the initial
    sequence numbers.
    """
    return PacketRecord(
        timestamp=timestamp,
        source_ip=SERVER_IP,
        destination_ip=CLIENT_IP,
        seq_num=(SERVER_ISN + seq) % 2**32,
        ack_num=(CLIENT_ISN + ack) % 2**32,
        is_syn=is_syn,
        is_ack=is_ack,
        window_size=window_size,
        payload_size=payload_size,
    )


def handshake(timestamp: int = 0):
    return [
        client_packet(timestamp, is_syn=True, is_ack=False),
        server_packet(timestamp, ack=1, is_syn=True),
        client_packet(timestamp, seq=1, ack=1),
    ]
