# SPDX-License-Identifier: MIT
"""Core data model and dependency scanning for polybuild."""
