"""
Diffusion job client - command line entry point.

A thin driver that:
1. Loads configuration (.env + environment)
2. Configures logging
3. Builds the HTTP service binding, JobClient and GenerationService
4. Runs one generation and writes the bitmap
5. Maps failures to exit codes

Usage:
    python app.py generate --prompt "a landscape with mountains" --output art.bmp
    python app.py generate --prompt "x" --placeholder          # demo image, no service call

Exit codes:
    0    success
    1    any client error (submit, await, fetch, encode, payload)
    2    invalid command line
    130  cancelled (SIGINT / SIGTERM while waiting for the job)
"""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import threading
from contextlib import contextmanager
from functools import partial
from typing import Iterator, List, Optional

from config import get_config
from core.exceptions import AwaitCancelledError, DiffusionClientError
from core.http_service import HttpRemoteService
from core.job_client import JobClient
from models.job_request import JobRequest
from models.retry_policy import RetryPolicy
from services.generation_service import GenerationService
from logging_config import setup_logging, get_logger


# Module logger (configured after setup_logging)
logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def build_parser(config: type) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diffusion-client",
        description="Submit an image generation job and save the result as a BMP file.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate one image")
    gen.add_argument("--prompt", required=True, help="Text prompt")
    gen.add_argument("--negative-prompt", default=None, help="What to avoid in the image")
    gen.add_argument("--width", type=int, default=config.DEFAULT_WIDTH)
    gen.add_argument("--height", type=int, default=config.DEFAULT_HEIGHT)
    gen.add_argument("--steps", type=int, default=config.DEFAULT_STEPS,
                     help="Number of inference steps")
    gen.add_argument("--guidance", type=float, default=config.DEFAULT_GUIDANCE,
                     help="Guidance scale")
    gen.add_argument("--seed", type=int, default=config.DEFAULT_SEED)
    gen.add_argument("--output", "-o", default=config.DEFAULT_OUTPUT_PATH,
                     help="Output bitmap path")
    gen.add_argument("--service-url", default=config.SERVICE_URL)
    gen.add_argument("--max-attempts", type=int, default=config.POLL_MAX_ATTEMPTS,
                     help="Status checks before giving up")
    gen.add_argument("--delay", type=float, default=config.POLL_DELAY_SECONDS,
                     help="Seconds between status checks")
    gen.add_argument("--placeholder", action="store_true",
                     help="Write the gradient placeholder image without contacting the service")
    gen.add_argument("--json", action="store_true", help="Print the result as JSON")
    gen.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


@contextmanager
def _cancel_on_signals(cancel_event: threading.Event) -> Iterator[threading.Event]:
    """
    Turn SIGINT/SIGTERM into a cancel request while the block runs.

    The previous handlers are restored on exit, so outside the wait a
    Ctrl-C interrupts the process as usual.
    """

    def _handler(signum, _frame):
        logger.warning(f"Received signal {signum}, cancelling")
        cancel_event.set()

    signums = [signal.SIGINT]
    if hasattr(signal, "SIGTERM"):
        signums.append(signal.SIGTERM)

    previous = {signum: signal.signal(signum, _handler) for signum in signums}
    try:
        yield cancel_event
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def run_generate(args: argparse.Namespace, config: type,
                 cancel_event: Optional[threading.Event] = None) -> int:
    """Execute the generate subcommand. Returns the process exit code."""
    try:
        policy = RetryPolicy(max_attempts=args.max_attempts, delay_seconds=args.delay)
    except ValueError as e:
        logger.error(f"Invalid polling options: {e}")
        return EXIT_USAGE

    service = HttpRemoteService(
        args.service_url,
        request_timeout=config.REQUEST_TIMEOUT_SECONDS,
        result_timeout=config.RESULT_TIMEOUT_SECONDS,
    )
    await_scope = (
        partial(_cancel_on_signals, cancel_event) if cancel_event is not None else None
    )
    generation = GenerationService(JobClient(service), policy, await_scope=await_scope)

    try:
        if args.placeholder:
            result = generation.write_placeholder(args.width, args.height, args.output)
        else:
            request = JobRequest(
                prompt=args.prompt,
                width=args.width,
                height=args.height,
                num_inference_steps=args.steps,
                guidance_scale=args.guidance,
                seed=args.seed,
                negative_prompt=args.negative_prompt,
            )
            logger.info(f"Submitting job to {args.service_url}")
            result = generation.generate(request, args.output, cancel_event)
    except AwaitCancelledError as e:
        print(f"{e.kind}: {e.message}", file=sys.stderr)
        return EXIT_CANCELLED
    except DiffusionClientError as e:
        logger.error(f"{e.kind}: {e}")
        print(f"{e.kind}: {e.message}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        logger.error(f"Cannot write {args.output}: {e}")
        print(f"OSError: {e}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        service.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(f"Saved {result.output_path} ({result.size_bytes} bytes, {result.source.value})")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if (args.verbose or config.DEBUG) else logging.INFO
    setup_logging(
        log_level=log_level,
        log_dir=config.LOG_DIR,
        enable_file_logging=config.ENABLE_FILE_LOGGING,
    )
    logger.debug(f"Running in {config.ENVIRONMENT} mode")

    if args.command == "generate":
        return run_generate(args, config, threading.Event())

    parser.print_help()
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
