"""Prometheus metrics for document processing and question generation."""

from prometheus_client import Counter, Histogram

document_transitions_total = Counter(
    "document_transitions_total",
    "Document status transitions",
    ["status"],
)

generation_tasks_total = Counter(
    "generation_tasks_total",
    "Generation tasks by outcome",
    ["outcome"],
)

generation_batch_latency_ms = Histogram(
    "generation_batch_latency_ms",
    "Wall time of one concurrent generation chunk in milliseconds",
    buckets=[100, 500, 1000, 2000, 5000, 10000, 20000, 40000, 80000],
)

generated_drafts_total = Counter(
    "generated_drafts_total",
    "Generated question drafts by validation outcome",
    ["outcome"],
)


class PrometheusPipelineMetrics:
    """Prometheus-based pipeline metrics implementation."""

    def inc_transition(self, status: str) -> None:
        """Count a document entering status."""
        document_transitions_total.labels(status=status).inc()

    def inc_task(self, outcome: str) -> None:
        """Count a finished generation task."""
        generation_tasks_total.labels(outcome=outcome).inc()

    def record_batch_latency(self, latency_ms: float) -> None:
        """Record generation chunk latency."""
        generation_batch_latency_ms.observe(latency_ms)

    def inc_drafts(self, outcome: str, count: int = 1) -> None:
        """Count drafts accepted or rejected by validation."""
        if count:
            generated_drafts_total.labels(outcome=outcome).inc(count)
