# SPDX-License-Identifier: MIT
"""Knowledge Garden terminal client."""
