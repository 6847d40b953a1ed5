"""Properties app package.

Group house listings with their midweek and weekend rates, fees and
occupancy bounds, plus the seasonal rates owners set per period.
"""
