# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Data layer for the hospitality back-office dashboard."""

__version__ = "0.1.0"
