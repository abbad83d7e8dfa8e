"""
Image generation request model.

A JobRequest is an immutable snapshot of the generation parameters.
It is validated once at construction, so every later consumer
(JobClient, RemoteService bindings, the encoder) can trust its geometry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Any, Optional

from core.exceptions import InvalidJobRequestError
from modules.raster_encoder import MAX_DIMENSION


@dataclass(frozen=True)
class JobRequest:
    """
    Parameters for one image generation job.

    Frozen so it can be handed to the service binding without copies.
    """

    prompt: str
    """Text prompt describing the image."""

    width: int = 64
    """Image width in pixels."""

    height: int = 64
    """Image height in pixels."""

    num_inference_steps: int = 10
    """Number of denoising steps."""

    guidance_scale: float = 7.5
    """Classifier-free guidance scale."""

    seed: int = 12345
    """Random seed for reproducible output."""

    negative_prompt: Optional[str] = None
    """Optional prompt describing what to avoid."""

    def __post_init__(self) -> None:
        if not self.prompt or not self.prompt.strip():
            raise InvalidJobRequestError("prompt", self.prompt, "must not be empty")
        for name, value in (("width", self.width), ("height", self.height)):
            if value <= 0:
                raise InvalidJobRequestError(name, value, "must be > 0")
            if value > MAX_DIMENSION:
                raise InvalidJobRequestError(name, value, f"must be <= {MAX_DIMENSION}")
        if self.num_inference_steps < 1:
            raise InvalidJobRequestError(
                "num_inference_steps", self.num_inference_steps, "must be >= 1"
            )
        if self.guidance_scale <= 0:
            raise InvalidJobRequestError("guidance_scale", self.guidance_scale, "must be > 0")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON body expected by the generation endpoint."""
        data: Dict[str, Any] = {
            "prompt": self.prompt,
            "width": self.width,
            "height": self.height,
            "num_inference_steps": self.num_inference_steps,
            "guidance_scale": self.guidance_scale,
            "seed": self.seed,
        }
        if self.negative_prompt:
            data["negative_prompt"] = self.negative_prompt
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobRequest":
        """Create from dictionary, falling back to defaults for missing fields."""
        return cls(
            prompt=data.get("prompt", ""),
            width=int(data.get("width", 64)),
            height=int(data.get("height", 64)),
            num_inference_steps=int(data.get("num_inference_steps", 10)),
            guidance_scale=float(data.get("guidance_scale", 7.5)),
            seed=int(data.get("seed", 12345)),
            negative_prompt=data.get("negative_prompt"),
        )
