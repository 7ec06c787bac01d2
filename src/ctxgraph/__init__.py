"""ctxgraph: cached, content-addressed context graph of a notes folder with LLM summaries."""

__version__ = "0.1.0"
