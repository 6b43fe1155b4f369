from .engine import PacketTransport, TransactionEngine, TransactionError

__all__ = ["PacketTransport", "TransactionEngine", "TransactionError"]
