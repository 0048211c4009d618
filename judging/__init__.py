"""Scoring, ranking and callback classification for WCS prelim rounds."""
