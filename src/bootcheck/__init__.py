"""
bootcheck - idempotent development environment bootstrap and quality checks.

Two pipelines share one Step/Pipeline abstraction:

- Provisioning: install the package manager, sync dependencies, create the
  config file from its template, prepare log files, optionally follow logs.
  Any failure aborts the run.
- Quality: lint, format, sort imports and run unit tests. Failures are
  collected and reported as one aggregate result.

Example usage:
    from bootcheck import Pipeline, Step, Outcome

    pipeline = Pipeline("demo", [Step("hello", lambda: Outcome.success("hi"))])
    result = pipeline.run()
    assert result.ok
"""

__version__ = "0.1.0"
__all__ = [
    "Outcome",
    "Step",
    "Pipeline",
    "PipelineResult",
    "RunConfig",
    "get_config",
    "__version__",
]


# Lazy imports keep `import bootcheck` free of click and httpx
def __getattr__(name: str):
    if name in ("Outcome", "Step", "PipelineResult", "RunConfig"):
        from bootcheck import models
        return getattr(models, name)
    if name == "Pipeline":
        from bootcheck.pipeline import Pipeline
        return Pipeline
    if name == "get_config":
        from bootcheck.config import get_config
        return get_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
