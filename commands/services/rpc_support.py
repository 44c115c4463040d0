"""
Shared impacket imports for remote service enumeration.
"""

try:
    from impacket.dcerpc.v5 import transport, scmr
    RPC_AVAILABLE = True
except ImportError:
    transport = None  # type: ignore
    scmr = None  # type: ignore
    RPC_AVAILABLE = False

__all__ = ["transport", "scmr", "RPC_AVAILABLE"]
