"""
Document Record Extraction Engine.

Turns scanned or photographed documents into structured records: a
summary, typed fields with confidences, named entities and a category.

Subpackages:
    - utils: logging, exceptions, helpers
    - model_inference: data model, model providers, response normalizer
    - heuristics: pattern-based extraction
    - classification: categories and the category classifier
    - reconciliation: merge, augmentation policy, asset names
    - input_handler: page loading
    - output_handler: category store, output records
    - pipeline: jobs and the orchestrator
"""

__version__ = "1.0.0"
