class GridCropError(Exception):
    """Base class for errors raised by the cropping core."""


class ImageLoadError(GridCropError):
    """The uploaded file could not be read or decoded."""


class ExportError(GridCropError):
    """Writing cell images or the zip archive failed."""
