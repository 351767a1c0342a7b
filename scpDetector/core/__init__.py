"""Detector models, page classification and the detector controller."""
