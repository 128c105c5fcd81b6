"""
Request → device metadata.

Session descriptors record where a login came from so a conflicting
login can be told "someone is already signed in on <device> since
<time>".  None of this is used for authorization.
"""

import hashlib
from dataclasses import dataclass

from fastapi import Request

UNKNOWN_DEVICE = "Unknown Device"


@dataclass(frozen=True)
class DeviceInfo:
    ip_address: str
    user_agent: str
    device_type: str
    fingerprint: str


def get_client_ip(request: Request) -> str:
    """Best-effort client IP, honouring the usual proxy headers in order."""
    headers = request.headers
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        ip = forwarded_for.split(",")[0].strip()
    elif headers.get("x-real-ip"):
        ip = headers["x-real-ip"]
    elif headers.get("cf-connecting-ip"):
        ip = headers["cf-connecting-ip"]
    else:
        ip = request.client.host if request.client else ""

    # IPv6-mapped IPv4
    if ip.startswith("::ffff:"):
        ip = ip[len("::ffff:"):]
    return ip or "unknown"


def get_device_type(user_agent: str | None) -> str:
    if not user_agent:
        return UNKNOWN_DEVICE

    ua = user_agent.lower()
    if "mobile" in ua or "android" in ua or "iphone" in ua:
        return "Mobile Device"
    if "tablet" in ua or "ipad" in ua:
        return "Tablet Device"
    if "chrome" in ua:
        return "Chrome Browser"
    if "firefox" in ua:
        return "Firefox Browser"
    if "safari" in ua:
        return "Safari Browser"
    if "edge" in ua:
        return "Edge Browser"
    return "Desktop Browser"


def device_fingerprint(ip_address: str, user_agent: str) -> str:
    """First 16 hex chars of sha256("ip:user_agent")."""
    digest = hashlib.sha256(f"{ip_address}:{user_agent}".encode("utf-8")).hexdigest()
    return digest[:16]


def describe_device(request: Request) -> DeviceInfo:
    ip = get_client_ip(request)
    raw_user_agent = request.headers.get("user-agent")
    user_agent = raw_user_agent or UNKNOWN_DEVICE
    return DeviceInfo(
        ip_address=ip,
        user_agent=user_agent,
        device_type=get_device_type(raw_user_agent),
        fingerprint=device_fingerprint(ip, user_agent),
    )
