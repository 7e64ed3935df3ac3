"""
Survey dashboard: turns a survey response workbook into chart-ready data.
"""
