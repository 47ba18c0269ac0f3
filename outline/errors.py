from infra.cancellation import PipelineCancelled


class OutlineError(Exception):
    """Base class for outline pipeline failures."""


class StructureExtractionError(OutlineError):
    """No usable skeleton could be obtained; the pipeline cannot continue."""


class EmptyDocumentError(OutlineError):
    """The page store holds no pages."""


__all__ = [
    "OutlineError",
    "StructureExtractionError",
    "EmptyDocumentError",
    "PipelineCancelled",
]
