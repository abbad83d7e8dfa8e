"""Helper modules for the diffusion job client."""

__all__ = [
    "raster_encoder",
]
