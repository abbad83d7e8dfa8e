"""
Tests for GenerationService and the image writer.

End-to-end flow runs against FakeRemoteService with a no-op sleep and
writes into pytest's tmp_path.
"""

from contextlib import contextmanager
from unittest.mock import patch

import pytest

from conftest import FakeRemoteService
from core.exceptions import (
    AwaitTimeoutError,
    EmptyPayloadError,
    InvalidDimensionsError,
    PayloadFormatError,
)
from core.job_client import JobClient
from models.image_buffer import ImageBuffer, ImageSource
from models.job_status import HandleState, JobStatus
from models.retry_policy import RetryPolicy
from modules.raster_encoder import encode_bitmap, read_bitmap_header
from services.generation_service import GenerationService
from services.image_writer import write_image


def _service(fake, no_sleep, logger, max_attempts=5):
    client = JobClient(fake, sleep=no_sleep, logger=logger)
    return GenerationService(client, RetryPolicy(max_attempts=max_attempts, delay_seconds=0),
                             logger=logger)


class TestEndToEnd:
    """submit -> await -> fetch -> write."""

    def test_raw_rgb_payload_64x64(self, sample_request, no_sleep, logger, tmp_path):
        """Pending once, then Completed; 64*64*3 raw bytes become a 12342-byte file."""
        fake = FakeRemoteService(
            statuses=[JobStatus.pending(), JobStatus.completed()],
            result=bytes(64 * 64 * 3),
        )
        service = _service(fake, no_sleep, logger)
        output = tmp_path / "out.bmp"

        result = service.generate(sample_request, output)

        assert output.stat().st_size == 12342
        assert result.size_bytes == 12342
        assert result.source is ImageSource.ENCODED
        assert result.job_id == "task_1"
        assert result.state is HandleState.COMPLETED
        assert len(fake.status_calls) == 2
        assert fake.submitted[0].seed == 12345

        info = read_bitmap_header(output.read_bytes())
        assert (info.width, info.height) == (64, 64)

    def test_bitmap_payload_written_verbatim(self, sample_request, no_sleep, logger, tmp_path):
        bitmap = encode_bitmap(64, 64)
        fake = FakeRemoteService(result=bitmap)
        service = _service(fake, no_sleep, logger)
        output = tmp_path / "out.bmp"

        result = service.generate(sample_request, output)

        assert output.read_bytes() == bitmap
        assert result.source is ImageSource.SERVICE

    def test_timeout_writes_nothing(self, sample_request, no_sleep, logger, tmp_path):
        fake = FakeRemoteService(statuses=[JobStatus.pending()], result=bytes(64 * 64 * 3))
        service = _service(fake, no_sleep, logger, max_attempts=3)
        output = tmp_path / "out.bmp"

        with pytest.raises(AwaitTimeoutError):
            service.generate(sample_request, output)

        assert not output.exists()
        assert fake.result_calls == []

    def test_empty_payload_writes_nothing(self, sample_request, no_sleep, logger, tmp_path):
        fake = FakeRemoteService(result=b"")
        service = _service(fake, no_sleep, logger)
        output = tmp_path / "out.bmp"

        with pytest.raises(EmptyPayloadError):
            service.generate(sample_request, output)

        assert not output.exists()

    def test_unrecognized_payload(self, sample_request, no_sleep, logger, tmp_path):
        fake = FakeRemoteService(result=b"\x89PNG\r\n\x1a\n" + bytes(100))
        service = _service(fake, no_sleep, logger)
        output = tmp_path / "out.bmp"

        with pytest.raises(PayloadFormatError) as exc_info:
            service.generate(sample_request, output)

        assert exc_info.value.size == 108
        assert not output.exists()

    def test_await_scope_covers_only_waiting(self, sample_request, no_sleep, logger, tmp_path):
        events = []

        class RecordingService(FakeRemoteService):
            def get_status(self, job_id):
                events.append("poll")
                return super().get_status(job_id)

            def get_result(self, job_id):
                events.append("fetch")
                return super().get_result(job_id)

        @contextmanager
        def scope():
            events.append("enter")
            yield
            events.append("exit")

        fake = RecordingService(result=bytes(64 * 64 * 3))
        client = JobClient(fake, sleep=no_sleep, logger=logger)
        service = GenerationService(client, RetryPolicy(max_attempts=3, delay_seconds=0),
                                    logger=logger, await_scope=scope)

        service.generate(sample_request, tmp_path / "out.bmp")

        assert events == ["enter", "poll", "exit", "fetch"]


class TestBuildImageBuffer:

    def test_mismatched_bitmap_geometry_kept(self, sample_request, no_sleep, logger):
        """A valid bitmap of another size is still the authentic result."""
        service = _service(FakeRemoteService(), no_sleep, logger)

        buffer = service.build_image_buffer(encode_bitmap(32, 16), sample_request)

        assert (buffer.width, buffer.height) == (32, 16)
        assert buffer.source is ImageSource.SERVICE


class TestPlaceholder:

    def test_placeholder_does_not_contact_service(self, no_sleep, logger, tmp_path):
        fake = FakeRemoteService()
        service = _service(fake, no_sleep, logger)
        output = tmp_path / "demo.bmp"

        result = service.write_placeholder(64, 64, output)

        assert output.read_bytes() == encode_bitmap(64, 64)
        assert result.source is ImageSource.PLACEHOLDER
        assert result.job_id is None
        assert fake.submitted == []

    def test_placeholder_invalid_dimensions(self, no_sleep, logger, tmp_path):
        service = _service(FakeRemoteService(), no_sleep, logger)

        with pytest.raises(InvalidDimensionsError):
            service.write_placeholder(0, 64, tmp_path / "demo.bmp")

        assert not (tmp_path / "demo.bmp").exists()


class TestImageWriter:

    def test_creates_parent_directories(self, tmp_path):
        buffer = ImageBuffer(data=b"BMdata", width=1, height=1, source=ImageSource.SERVICE)
        target = tmp_path / "nested" / "dir" / "image.bmp"

        written = write_image(buffer, target)

        assert written == target.resolve()
        assert target.read_bytes() == b"BMdata"

    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "image.bmp"
        target.write_bytes(b"old")
        buffer = ImageBuffer(data=b"new", width=1, height=1, source=ImageSource.SERVICE)

        write_image(buffer, target)

        assert target.read_bytes() == b"new"

    def test_failure_leaves_no_files(self, tmp_path):
        target = tmp_path / "image.bmp"
        target.write_bytes(b"old")
        buffer = ImageBuffer(data=b"new", width=1, height=1, source=ImageSource.SERVICE)

        with patch("services.image_writer.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_image(buffer, target)

        assert target.read_bytes() == b"old"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["image.bmp"]
