from flicker.trace.io import read_run_meta, read_trace_artifact, write_run_meta, write_trace_artifact
from flicker.trace.models import TraceArtifact, TraceEntry, TraceViolation
from flicker.trace.naming import (
    artifact_stem,
    run_meta_path,
    trace_path,
    validate_monitor_name,
    validate_tag,
    validate_test_name,
)

__all__ = [
    "TraceArtifact",
    "TraceEntry",
    "TraceViolation",
    "artifact_stem",
    "read_run_meta",
    "read_trace_artifact",
    "run_meta_path",
    "trace_path",
    "validate_monitor_name",
    "validate_tag",
    "validate_test_name",
    "write_run_meta",
    "write_trace_artifact",
]
