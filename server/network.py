"""Local network address helpers."""

import socket


def get_local_ip() -> str:
    """
    Get this device's IPv4 address on the local network.

    Uses the routing table approach: connecting a UDP socket sends no
    packets but selects the outbound interface.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(('8.8.8.8', 80))
        ip = s.getsockname()[0]
    except OSError:
        try:
            ip = socket.gethostbyname(socket.gethostname())
        except OSError:
            ip = 'localhost'
    finally:
        s.close()
    return ip


def subnet_prefix(ip: str) -> str:
    """
    Return the first three octets of an IPv4 address ("192.168.1").
    """
    return ip.rsplit('.', 1)[0] if ip.count('.') == 3 else ip


def get_hostname() -> str:
    return socket.gethostname()
