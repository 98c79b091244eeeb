# SPDX-License-Identifier: MIT
"""Video generation tool using the SiliconFlow API.

Submission is synchronous; completion is tracked by a detached poll loop that
reports through the notification channels. Calls are rejected up front when no
notification channel is configured.
"""

import time
from typing import Any

import httpx

from ..config import Settings, logger
from ..exceptions import internal_error, invalid_params, invalid_request, provider_message
from ..notify import any_channel_configured
from ..providers.siliconflow import SUPPORTED_VIDEO_MODELS, VIDEO_IMAGE_SIZES, is_image_to_video, submit_video
from ..tasks.runner import spawn_background
from ..tasks.video_poll import TaskSubmission, poll_video_task
from ..types import VideoSubmitResult


def _build_request(args: dict[str, Any], settings: Settings) -> dict[str, Any]:
    for name in ("prompt", "image_size"):
        if not isinstance(args.get(name), str) or not args[name]:
            raise invalid_params('Parameters "prompt" (string) and "image_size" (string) are required for generate_video.')
    if args["image_size"] not in VIDEO_IMAGE_SIZES:
        raise invalid_params(f'Invalid image_size "{args["image_size"]}". Supported sizes: {", ".join(VIDEO_IMAGE_SIZES)}.')

    model = args.get("model") or settings.siliconflow_video_model
    if model not in SUPPORTED_VIDEO_MODELS:
        raise invalid_params(
            f'Invalid model for generate_video: "{model}". Supported models are: {", ".join(SUPPORTED_VIDEO_MODELS)}.'
        )

    body: dict[str, Any] = {"model": model, "prompt": args["prompt"], "image_size": args["image_size"]}
    if is_image_to_video(model):
        if not isinstance(args.get("image"), str) or not args["image"]:
            raise invalid_params(
                f'Parameter "image" (string URL or base64 data) is required when using an Image-to-Video model like "{model}".'
            )
        body["image"] = args["image"]
    elif args.get("image"):
        logger.warning('Parameter "image" ignored: %s is a Text-to-Video model', model)

    if args.get("negative_prompt"):
        body["negative_prompt"] = args["negative_prompt"]
    if args.get("seed") is not None:
        body["seed"] = args["seed"]
    return body


async def generate_video(args: dict[str, Any], settings: Settings) -> VideoSubmitResult:
    """Submit a video job and start tracking it in the background.

    Raises:
        McpError: INVALID_REQUEST when no notification channel or API key is configured
            (or the provider rejects the credentials), INVALID_PARAMS for bad arguments,
            INTERNAL_ERROR when submission fails otherwise
    """
    if not any_channel_configured(settings):
        raise invalid_request(
            "Video generation requires at least one notification method (OneBot or Telegram) "
            "to be configured to receive results."
        )

    body = _build_request(args, settings)
    api_key = settings.siliconflow_api_key
    if not api_key:
        raise invalid_request("SiliconFlow API Key (SILICONFLOW_API_KEY) is not configured.")

    logger.info("Submitting video generation job with %s", body["model"])
    try:
        request_id = await submit_video(settings, api_key, body)
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        message = f"SiliconFlow API Error: {provider_message(e.response)}"
        if status == 401:
            raise invalid_request(message) from e
        if status == 400:
            raise invalid_params(message) from e
        raise internal_error(message) from e
    except (httpx.HTTPError, ValueError) as e:
        raise internal_error(f"Failed to submit video generation job: {e}") from e

    submission = TaskSubmission(
        request_id=request_id,
        prompt=args["prompt"],
        model=body["model"],
        api_key=api_key,
        start_time=time.monotonic(),
    )
    spawn_background(poll_video_task(submission, settings), name=f"generate_video:{request_id}")
    logger.info("Video generation job submitted. Request ID: %s", request_id)

    return {
        "status": "submitted",
        "message": f"Video generation job submitted successfully with Request ID: {request_id}. "
        "You will be notified upon completion.",
        "requestId": request_id,
    }
