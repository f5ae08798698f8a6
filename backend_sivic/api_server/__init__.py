"""
API server package: HTTP interface to the detection engine.

Streams analysis progress as NDJSON, returns final reports, and serves
AI-written insights over an already computed report.
"""
