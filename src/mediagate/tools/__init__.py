# SPDX-License-Identifier: MIT
"""MCP tool handlers for media generation.

This package contains the tool implementations organized by category:
- images: image generation and editing (inline or background by model)
- speech: text-to-speech with optional WebDAV upload
- transcription: speech-to-text from local files or URLs
- video: SiliconFlow video submission with background polling
- router: name -> handler dispatch used by the FastMCP server
"""
