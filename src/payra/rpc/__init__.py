"""
JSON-RPC transport and its blocking bridge
"""

from payra.rpc.bridge import CallbackTransport, Cancellable, PendingCall, call_read_only
from payra.rpc.transport import RpcCallback, RpcTransport

__all__ = [
    "CallbackTransport",
    "Cancellable",
    "PendingCall",
    "RpcCallback",
    "RpcTransport",
    "call_read_only",
]
