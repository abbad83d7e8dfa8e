"""
Generation result data model.

Records the outcome of one generate run: which job produced the image,
where it was written and how the bytes were obtained. Used by the CLI
for its summary line and --json output.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from .image_buffer import ImageSource
from .job_status import HandleState


@dataclass
class GenerationResult:
    """
    Result of one image generation run.

    Created once by GenerationService after the output file exists.
    """

    job_id: Optional[str]
    """Job identifier, or None for the placeholder path (no job submitted)."""

    output_path: str
    """Path of the written bitmap."""

    size_bytes: int
    """Size of the written file."""

    source: ImageSource
    """How the image bytes were produced."""

    width: int
    height: int

    state: Optional[HandleState] = None
    """Final handle state (None when no job was submitted)."""

    finished_at: Optional[datetime] = None
    """When the file was written."""

    notes: str = ""
    """Additional information for the user."""

    @classmethod
    def create_from_job(
        cls,
        job_id: str,
        output_path: str,
        size_bytes: int,
        source: ImageSource,
        width: int,
        height: int,
    ) -> "GenerationResult":
        """
        Create a result for an image obtained from a completed job.

        Args:
            job_id: Identifier of the completed job
            output_path: Where the bitmap was written
            size_bytes: File size in bytes
            source: SERVICE (verbatim bitmap) or ENCODED (raw pixels)
            width: Image width
            height: Image height

        Returns:
            GenerationResult in COMPLETED state
        """
        notes = (
            "Bitmap written as returned by the service."
            if source is ImageSource.SERVICE
            else "Raw pixels from the service encoded as bitmap."
        )
        return cls(
            job_id=job_id,
            output_path=output_path,
            size_bytes=size_bytes,
            source=source,
            width=width,
            height=height,
            state=HandleState.COMPLETED,
            finished_at=datetime.now(timezone.utc),
            notes=notes,
        )

    @classmethod
    def create_placeholder(
        cls,
        output_path: str,
        size_bytes: int,
        width: int,
        height: int,
    ) -> "GenerationResult":
        """Create a result for a locally generated placeholder image."""
        return cls(
            job_id=None,
            output_path=output_path,
            size_bytes=size_bytes,
            source=ImageSource.PLACEHOLDER,
            width=width,
            height=height,
            finished_at=datetime.now(timezone.utc),
            notes="Placeholder gradient - no job was submitted.",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "job_id": self.job_id,
            "output_path": self.output_path,
            "size_bytes": self.size_bytes,
            "source": self.source.value,
            "width": self.width,
            "height": self.height,
            "state": self.state.value if self.state else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "notes": self.notes,
        }
