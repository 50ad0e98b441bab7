"""weekgoals: weekly goal tracking with nested sub-items.

Goals belong to a week (keyed by that week's Monday) and carry an ordered
tree of checkbox or plain-list sub-items. Weeks round-trip through a
markdown checklist format so they can be copied and pasted between tools.
"""

__version__ = "0.1.0"
