from newsrag.pipeline.context import PipelineContext, build_context

__all__ = ["PipelineContext", "build_context"]
