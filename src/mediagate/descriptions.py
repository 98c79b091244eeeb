# SPDX-License-Identifier: MIT
"""Tool descriptions for MCP server. Optimized for token efficiency."""

# ==================== IMAGE TOOL DESCRIPTIONS ====================

GENERATE_IMAGE = """Generate images via an OpenAI-compatible API. Saved under images/ and mirrored to the image bed when configured.

dall-e-3 / gpt-image-1 models run in the background: returns status='processing_in_background' at once, results arrive as notifications. Other models return a list of {local_path, remote_url, remote_upload_success, error} per image.

Params: prompt, model, n (1-10), width/height (128-2048) and steps (1-100) for non dall-e-3/gpt-image-1 models, size (1024x1024|1536x1024|1024x1536|auto), quality (auto|high|medium|low), background (transparent|opaque|auto), moderation (low|auto) for dall-e-3/gpt-image-1

It is recommended to format returned URLs as Markdown.

Example: generate_image("mountain sunset", model="flux-schnell", width=1024, height=768)"""

EDIT_IMAGE = """Edit an image from a local file path or URL according to a text prompt.

dall-e-3 / gpt-image-1 models run in the background and report through notifications.

Params: image (path or URL), prompt (max 32000 chars), model, n (1-10), size (1024x1024|1536x1024|1024x1536|auto)

Example: edit_image("https://example.com/cat.png", "add a red hat")"""


# ==================== AUDIO TOOL DESCRIPTIONS ====================

GENERATE_SPEECH = """Text-to-speech. Saves an mp3 under audio/ and uploads it to WebDAV when configured.

Models: tts-1, tts-1-hd, gpt-4o-mini-tts

Params: input (max 4096 chars), voice, model, speed (0.25-4.0)

Returns: [{path, webdav_upload_status (success|failed|skipped)}]

Example: generate_speech("Hello world", voice="nova", speed=1.2)"""

TRANSCRIBE_AUDIO = """Transcribe audio to text.

Models: gpt-4o-transcribe, gpt-4o-mini-transcribe, whisper-1
Formats: flac, mp3, mp4, mpeg, mpga, m4a, ogg, wav, webm

Params: file (local path or URL), model

Returns: [{text}]"""


# ==================== VIDEO TOOL DESCRIPTIONS ====================

GENERATE_VIDEO = """Submit a SiliconFlow video generation job. Returns requestId at once; the finished video is downloaded under video/ and announced through the configured notification channels (OneBot/Telegram, at least one required).

Models: Wan-AI/Wan2.1-T2V-14B, Wan-AI/Wan2.1-T2V-14B-Turbo (text-to-video), Wan-AI/Wan2.1-I2V-14B-720P, Wan-AI/Wan2.1-I2V-14B-720P-Turbo (image-to-video, require image)

Params: prompt, image_size (1280x720|720x1280|960x960), model, negative_prompt, image (URL or data:image/png;base64,...), seed

Example: generate_video("a fox running through snow", image_size="1280x720")"""
