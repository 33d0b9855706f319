"""
Services for the K0s resolution pipeline.

Each subpackage has a single responsibility: calculations, selection,
truth matching, histograms, ingestion and the event pipelines.
"""
