from .router import ConsolidationPipeline, PipelineOptions, make_pipeline
from .schema import Region, TextElement

__all__ = [
    "ConsolidationPipeline",
    "PipelineOptions",
    "make_pipeline",
    "Region",
    "TextElement",
]
