"""
Core classification and aggregation layer.

This package contains:
- tabular_source: load the survey workbook into rows and cells
- text: key normalization and case-insensitive collections
- option_catalog: valid answer options per column ("opties" sheet)
- segment_index: respondent segments for the selector
- classifier: partition question columns into question groups
- aggregator: tallies and free-text collections per group
- chart_assembler: ordering, colors and the ChartDatum output
- engine: the entry points used by the UI
"""
