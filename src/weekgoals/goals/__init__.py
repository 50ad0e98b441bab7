"""Weekly goal trees: node types, tree helpers, markdown codec, week keys."""

from weekgoals.goals.markdown import decode_goals, encode_goals, encode_week, format_header
from weekgoals.goals.service import GoalService
from weekgoals.goals.tree import (
    append_child,
    build_tree,
    count_nodes,
    find_node_by_id,
    node_depth,
    remove_node,
    rename_node,
    sort_forest,
)
from weekgoals.goals.types import (
    MAX_DEPTH,
    MAX_TEXT_LENGTH,
    Goal,
    Progress,
    SubItem,
    SubItemType,
    clean_text,
)
from weekgoals.goals.weeks import (
    WeekRange,
    canonical_week_key,
    format_short_date,
    iso_week_number,
    parse_week_key,
    week_key,
    week_offset_for,
    week_range,
)

__all__ = [
    # Types
    "Goal",
    "SubItem",
    "SubItemType",
    "Progress",
    "MAX_DEPTH",
    "MAX_TEXT_LENGTH",
    "clean_text",
    # Tree
    "append_child",
    "build_tree",
    "count_nodes",
    "find_node_by_id",
    "node_depth",
    "remove_node",
    "rename_node",
    "sort_forest",
    # Markdown
    "decode_goals",
    "encode_goals",
    "encode_week",
    "format_header",
    # Weeks
    "WeekRange",
    "format_short_date",
    "iso_week_number",
    "canonical_week_key",
    "parse_week_key",
    "week_key",
    "week_offset_for",
    "week_range",
    # Service
    "GoalService",
]
