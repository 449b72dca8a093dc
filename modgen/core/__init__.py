# SPDX-License-Identifier: MIT
"""Core types shared across modgen."""
