from infra.pipeline.logger import RunLogger, create_logger
from infra.pipeline.rich_progress import RichProgressBar

__all__ = [
    # Logger
    "RunLogger",
    "create_logger",

    # Progress
    "RichProgressBar",
]
