from pixel_collector.pipeline.base import PipelineStep
from pixel_collector.pipeline.chain import ChainExecutor, ChainOutcome, build_default_chain

__all__ = ["PipelineStep", "ChainExecutor", "ChainOutcome", "build_default_chain"]
