"""Box and guided filtering primitives."""

from msfilter.filters.box import box_filter
from msfilter.filters.guided import guided_filter_channel

__all__ = ["box_filter", "guided_filter_channel"]
