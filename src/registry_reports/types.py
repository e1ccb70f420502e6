# src/registry_reports/types.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""JSON typing helpers shared by presenters and HTTP envelopes."""

from __future__ import annotations

type JsonPrimitive = None | bool | int | float | str
type JsonValue = JsonPrimitive | list[JsonValue] | dict[str, JsonValue]

__all__ = ["JsonPrimitive", "JsonValue"]
