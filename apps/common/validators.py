"""
Security helpers for Storefront Checkout
Proxy-aware client IP detection and security event logging.
"""

import ipaddress
import logging
from typing import Any

from django.conf import settings
from django.http import HttpRequest
from ipware import get_client_ip as ipware_get_client_ip

logger = logging.getLogger(__name__)


def _is_trusted_proxy(ip: str, trusted_proxies: list[str]) -> bool:
    """Check an address against IPs and CIDR ranges"""
    try:
        ip_addr = ipaddress.ip_address(ip)
    except ValueError:
        return False

    for proxy in trusted_proxies:
        try:
            if ip_addr in ipaddress.ip_network(proxy, strict=False):
                return True
        except ValueError:
            continue
    return False


def get_client_ip(request: HttpRequest) -> str:
    """
    🌐 Client IP that cannot be spoofed through forwarding headers.

    Forwarding headers are honoured only when the direct peer (REMOTE_ADDR) is
    listed in IPWARE_TRUSTED_PROXY_LIST; otherwise REMOTE_ADDR is the answer.
    """
    trusted_proxies: list[str] = getattr(settings, 'IPWARE_TRUSTED_PROXY_LIST', [])
    remote_addr = request.META.get('REMOTE_ADDR') or '127.0.0.1'

    if not trusted_proxies or not _is_trusted_proxy(remote_addr, trusted_proxies):
        return remote_addr

    client_ip, _routable = ipware_get_client_ip(request)
    return str(client_ip) if client_ip else remote_addr


def log_security_event(event_type: str, details: dict[str, Any], request_ip: str | None = None) -> None:
    """
    Log security events for monitoring and forensics
    """
    logger.warning(f"🚨 [Security] {event_type}: {details} from IP: {request_ip}")
