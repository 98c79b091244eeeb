# SPDX-License-Identifier: MIT
"""Background jobs that outlive the tool call that started them."""
