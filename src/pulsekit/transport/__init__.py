from .http_transport import BATCH_PATH, SINGLE_PATH, HttpTransport, in_send

__all__ = ["HttpTransport", "SINGLE_PATH", "BATCH_PATH", "in_send"]
