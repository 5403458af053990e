"""
Example usage of HTTPCollector behind an OpenTelemetry tracer.
"""

import logging
import os
import time
from dotenv import load_dotenv
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor

from spancollector import HTTPCollector, JSONSerializer, CollectorSpanExporter, ShutdownError

# Load SPANCOLLECTOR_URL etc. from .env file
load_dotenv()

logging.basicConfig(level=logging.INFO)
logging.getLogger("SpanCollector").setLevel(logging.DEBUG)

print(f"Collector URL: {os.getenv('SPANCOLLECTOR_URL', 'not set')}")

collector = HTTPCollector(
    os.getenv("SPANCOLLECTOR_URL", "http://localhost:9411/spans"),
    serializer=JSONSerializer(),
    batch_size=10,
    batch_interval=0.5,
)
provider = TracerProvider()
provider.add_span_processor(SimpleSpanProcessor(CollectorSpanExporter(collector)))
tracer = provider.get_tracer("example")


def handle_request(n: int) -> int:
    with tracer.start_as_current_span("handle_request") as span:
        span.set_attribute("request.number", n)
        with tracer.start_as_current_span("compute"):
            time.sleep(0.01)
            return n * n


if __name__ == "__main__":
    for i in range(25):
        handle_request(i)
    print(f"Pending: {collector.pending_count}, dropped: {collector.dropped_count}")
    try:
        collector.close()
    except ShutdownError as e:
        print(f"Final flush failed: {e}")
