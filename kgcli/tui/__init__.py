# SPDX-License-Identifier: MIT
"""Terminal UI: the view-orchestration loop and its Textual shell."""
