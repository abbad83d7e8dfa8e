"""
Image generation service.

Composes the pieces of one generate run:

    JobClient.submit -> JobClient.await_completion -> JobClient.fetch
        -> classify payload -> (write verbatim | encode raw RGB) -> write file

Payload classification:
    - a well-formed 24-bit bitmap    -> written as returned (SERVICE)
    - exactly width*height*3 bytes   -> treated as raw RGB rows, encoded (ENCODED)
    - anything else                  -> PayloadFormatError

The placeholder gradient is only written through write_placeholder(),
the explicit demo path; it never replaces a failed or unrecognized job
result silently.

Usage:
    service = GenerationService(job_client, RetryPolicy(30, 2.0))
    result = service.generate(request, "generated_image.bmp")
    print(result.output_path, result.size_bytes)
"""

from __future__ import annotations

import contextlib
import logging
import threading
from pathlib import Path
from typing import Any, Callable, ContextManager, Optional

from core.exceptions import InvalidBitmapError, PayloadFormatError
from core.job_client import JobClient
from models.generation_result import GenerationResult
from models.image_buffer import ImageBuffer, ImageSource
from models.job_request import JobRequest
from models.retry_policy import RetryPolicy
from modules.raster_encoder import BYTES_PER_PIXEL, RasterEncoder, read_bitmap_header
from logging_config import get_job_logger

from .image_writer import write_image


class GenerationService:
    """
    Runs one image generation job end to end.

    Attributes:
        job_client: Client used for the job lifecycle
        policy: Polling budget for await_completion()

    await_scope is called to get a context manager that is entered only
    while waiting for the job (the CLI installs its signal handlers there).
    """

    def __init__(
        self,
        job_client: JobClient,
        policy: RetryPolicy,
        encoder: Optional[RasterEncoder] = None,
        logger: Optional[logging.Logger] = None,
        await_scope: Optional[Callable[[], ContextManager[Any]]] = None
    ):
        self.job_client = job_client
        self.policy = policy
        self._await_scope = await_scope or contextlib.nullcontext
        self._encoder = encoder or RasterEncoder()
        self._logger = logger or logging.getLogger("diffusion_client.services.generation")

    def generate(
        self,
        request: JobRequest,
        output_path: str | Path,
        cancel_event: Optional[threading.Event] = None
    ) -> GenerationResult:
        """
        Submit a job, wait for it, fetch the result and write it to disk.

        The output file is only created once a complete bitmap exists in
        memory.

        Args:
            request: Generation parameters
            output_path: Destination bitmap path
            cancel_event: Optional event that cancels waiting

        Returns:
            GenerationResult describing the written file

        Raises:
            SubmitError, AwaitError, FetchError: From the job lifecycle
            PayloadFormatError: Fetched bytes are not a usable image
            EncodeError: Raw pixels could not be encoded
        """
        handle = self.job_client.submit(request)
        job_logger = get_job_logger(handle.job_id)

        with self._await_scope():
            self.job_client.await_completion(handle, self.policy, cancel_event)
        payload = self.job_client.fetch(handle)

        buffer = self.build_image_buffer(payload, request)
        job_logger.info(
            f"Image ready: {buffer.width}x{buffer.height}, "
            f"{buffer.size} bytes, source={buffer.source.value}"
        )

        written = write_image(buffer, output_path)
        return GenerationResult.create_from_job(
            job_id=handle.job_id,
            output_path=str(written),
            size_bytes=buffer.size,
            source=buffer.source,
            width=buffer.width,
            height=buffer.height,
        )

    def build_image_buffer(self, payload: bytes, request: JobRequest) -> ImageBuffer:
        """
        Turn a fetched payload into a complete bitmap.

        Args:
            payload: Non-empty bytes from JobClient.fetch()
            request: The request the payload answers (expected geometry)

        Returns:
            ImageBuffer ready to be written

        Raises:
            PayloadFormatError: Neither a bitmap nor raw RGB of the requested size
        """
        try:
            info = read_bitmap_header(payload)
        except InvalidBitmapError as e:
            self._logger.debug(f"Payload is not a bitmap: {e.message}")
        else:
            if (info.width, info.height) != (request.width, request.height):
                self._logger.warning(
                    f"Service returned {info.width}x{info.height}, "
                    f"requested {request.width}x{request.height}"
                )
            return ImageBuffer(
                data=payload,
                width=info.width,
                height=info.height,
                source=ImageSource.SERVICE,
            )

        if len(payload) == request.pixel_count * BYTES_PER_PIXEL:
            data = self._encoder.encode_rgb(payload, request.width, request.height)
            return ImageBuffer(
                data=data,
                width=request.width,
                height=request.height,
                source=ImageSource.ENCODED,
            )

        raise PayloadFormatError(len(payload), request.width, request.height)

    def write_placeholder(
        self,
        width: int,
        height: int,
        output_path: str | Path
    ) -> GenerationResult:
        """
        Write the deterministic gradient image without contacting the service.

        Raises:
            EncodeError: If the dimensions are invalid
        """
        data = self._encoder.placeholder(width, height)
        buffer = ImageBuffer(
            data=data,
            width=width,
            height=height,
            source=ImageSource.PLACEHOLDER,
        )
        written = write_image(buffer, output_path)
        self._logger.info(f"Placeholder {width}x{height} written to {written}")
        return GenerationResult.create_placeholder(
            output_path=str(written),
            size_bytes=buffer.size,
            width=width,
            height=height,
        )
