"""Workbook access: openpyxl document, readers, annotator and exporter."""
