# SPDX-License-Identifier: MIT
"""mediagate: MCP tools for image, speech, transcription, and video generation."""

__version__ = "0.1.0"
