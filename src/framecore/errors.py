"""Fatal error kinds raised out of batch production.

Transient empty reads are not errors and never surface here. Every
terminal condition is a ``ProducerError`` carrying a message and the call
site that detected it, so callers can catch the family or discriminate
on the concrete kind.
"""


class ProducerError(RuntimeError):
    """Base class for all terminal frame-production failures.

    Attributes:
        message: Human-readable description of the failure.
        location: Call-site tag, e.g. ``"DatumProducer.produce:get_frames"``.
    """

    def __init__(self, message: str, location: str) -> None:
        super().__init__(f"{message} [{location}]")
        self.message = message
        self.location = location


class StallError(ProducerError):
    """Source is open but has yielded no image data for too many reads."""

    def __init__(self, consecutive_empty: int, location: str) -> None:
        super().__init__(
            f"Detected too many ({consecutive_empty}) empty frames in a row.",
            location,
        )
        self.consecutive_empty = consecutive_empty


class ChannelLayoutError(ProducerError):
    """Primary view is not a 1- or 3-channel ``(H, W[, C])`` image.

    ``channels`` is None when the array is not 2D or 3D at all.
    """

    def __init__(
        self,
        channels: int | None,
        location: str,
        shape: tuple[int, ...] | None = None,
    ) -> None:
        if channels is None:
            detail = f"got an array of shape {shape}"
        else:
            detail = f"got {channels} channels"
        super().__init__(f"Input images must be 3-channel BGR, {detail}.", location)
        self.channels = channels
        self.shape = shape


class SourceIOError(ProducerError):
    """A ``FrameSource`` call raised; the original exception is chained."""
