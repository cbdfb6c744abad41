"""
Translation pipeline: resolve, coalesce, stream.
"""

from jitlate.pipeline.resolver import BatchResolver
from jitlate.pipeline.coalescer import RequestCoalescer, QueuedItem
from jitlate.pipeline.streaming import StreamingDelivery, DeliveryMode

__all__ = [
    "BatchResolver",
    "RequestCoalescer",
    "QueuedItem",
    "StreamingDelivery",
    "DeliveryMode",
]
