# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Civil registry report aggregation service."""

__version__ = "0.1.0"
