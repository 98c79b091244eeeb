# SPDX-License-Identifier: MIT
"""Third-party generation APIs not covered by the OpenAI-compatible client."""
